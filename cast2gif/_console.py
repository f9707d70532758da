"""Console shared by log messages and the progress display"""

from rich.console import Console

# Log records and the live progress display must go through the same console
# or they overwrite each other. stdout is left untouched.
console = Console(stderr=True)
