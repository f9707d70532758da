import io
import threading
import unittest
from unittest import mock

from rich.console import Console

from cast2gif.exceptions import ConversionError, FormatNotImplementedError
from cast2gif.pipeline import run_conversion
from cast2gif.plan import ExecutionPlan, OutputFormat
from cast2gif.progress import DualStageProgress, ProgressContractError, ProgressSnapshot

CAST = '\n'.join([
    '{"version": 2, "width": 20, "height": 3}',
    '[0.0, "o", "$ "]',
    '[0.2, "o", "ls\\r\\n"]',
    '[0.35, "o", "file.txt\\r\\n$ "]',
])


def make_plan(output_format=OutputFormat.SVG):
    return ExecutionPlan(input_handle=io.StringIO(CAST),
                         output_handle=io.BytesIO(),
                         format=output_format,
                         frame_interval=0.1,
                         overwrite_allowed=False,
                         cast_path='input.cast',
                         output_path='output.{}'.format(output_format))


def make_display():
    return DualStageProgress(console=Console(file=io.StringIO()), tick=0.01)


def complete(progress, total=2):
    progress.accept(ProgressSnapshot(0, 0, 0))
    progress.accept(ProgressSnapshot(0, 0, total))
    for index in range(total):
        progress.accept(ProgressSnapshot(index + 1, index, total))
        progress.accept(ProgressSnapshot(index + 1, index + 1, total))


class TestPipeline(unittest.TestCase):
    def test_run_conversion(self):
        for output_format in OutputFormat:
            with self.subTest(case=output_format):
                plan = make_plan(output_format)
                display = make_display()
                run_conversion(plan, display)
                self.assertTrue(display.done)
                self.assertEqual(display.latest, ProgressSnapshot(5, 5, 5))
                self.assertGreater(len(plan.output_handle.getvalue()), 0)

    def test_worker_thread(self):
        threads = []

        def converter(input_stream, output_file, frame_interval, progress):
            threads.append(threading.current_thread())
            self.assertEqual(frame_interval, 0.1)
            complete(progress)

        run_conversion(make_plan(), make_display(), {OutputFormat.SVG: converter})
        thread, = threads
        self.assertIsNot(thread, threading.current_thread())
        self.assertEqual(thread.name, 'cast2gif-converter')
        self.assertFalse(thread.is_alive())

    def test_errors_are_raised_in_caller(self):
        error = ConversionError('Could not read cast file')
        error.__cause__ = ValueError('line 1')
        test_cases = [
            ('conversion error', error),
            ('defect', ZeroDivisionError('division by zero')),
            ('defect after completion', KeyError('frame')),
        ]
        for case, exception in test_cases:
            with self.subTest(case=case):
                def converter(input_stream, output_file, frame_interval, progress):
                    if case == 'defect after completion':
                        complete(progress)
                    raise exception

                display = make_display()
                with self.assertRaises(type(exception)) as context:
                    run_conversion(make_plan(), display, {OutputFormat.SVG: converter})
                self.assertIs(context.exception, exception)

        with self.subTest(case='cause is preserved'):
            self.assertIsInstance(error.__cause__, ValueError)

    def test_format_not_implemented(self):
        converter = mock.Mock()
        with mock.patch('cast2gif.pipeline.threading.Thread') as thread_class:
            with self.assertRaises(FormatNotImplementedError) as context:
                run_conversion(make_plan(OutputFormat.GIF), make_display(),
                               {OutputFormat.SVG: converter})
        self.assertEqual(str(context.exception), 'Output format not implemented yet: gif')
        self.assertIsInstance(context.exception, NotImplementedError)
        thread_class.assert_not_called()
        converter.assert_not_called()

    def test_incomplete_progress(self):
        test_cases = [
            ('no snapshot', lambda progress: None),
            ('unknown total', lambda progress: progress.accept(ProgressSnapshot(0, 0, 0))),
            ('sequencing unfinished', lambda progress: progress.accept(ProgressSnapshot(2, 1, 2))),
        ]
        for case, report in test_cases:
            with self.subTest(case=case):
                def converter(input_stream, output_file, frame_interval, progress):
                    report(progress)

                with self.assertRaises(ProgressContractError):
                    run_conversion(make_plan(), make_display(), {OutputFormat.SVG: converter})

    def test_invalid_snapshot(self):
        def converter(input_stream, output_file, frame_interval, progress):
            progress.accept(ProgressSnapshot(0, 0, 2))
            progress.accept(ProgressSnapshot(0, 0, 3))

        with self.assertRaises(ProgressContractError):
            run_conversion(make_plan(), make_display(), {OutputFormat.SVG: converter})


if __name__ == '__main__':
    unittest.main()
