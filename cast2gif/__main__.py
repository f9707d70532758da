from cast2gif.main import main

if __name__ == '__main__':
    main()
