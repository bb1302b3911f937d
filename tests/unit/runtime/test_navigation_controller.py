"""Scenario tests for the navigation controller's effect execution."""

from __future__ import annotations

import contextlib
import subprocess
import tempfile
import unittest
from pathlib import Path

from cherrypiq.alternate import HANDOFF_FILENAME, AlternateSelector
from cherrypiq.bundler import BundleInvoker
from cherrypiq.ignore import load_ignore_patterns
from cherrypiq.preview import PreviewRenderer
from cherrypiq.runtime.controller import (
    CLIPBOARD_DONE_MESSAGE,
    DIRECT_DONE_MESSAGE,
    NO_FILES_MESSAGE,
    NavigationController,
)
from cherrypiq.runtime.transitions import Command, Event, Mode
from cherrypiq.stats import HeuristicTokenizer, StatsAggregator


def _touch(path: Path, text: str = "print('x')\n") -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(text, encoding="utf-8")
    return path


class _BundlerRunner:
    def __init__(self, returncode: int = 0, stdout: str = "", stderr: str = "") -> None:
        self.calls: list[list[str]] = []
        self.returncode = returncode
        self.stdout = stdout
        self.stderr = stderr

    def __call__(self, argv, **kwargs):
        self.calls.append(list(argv))
        return subprocess.CompletedProcess(argv, self.returncode, stdout=self.stdout, stderr=self.stderr)


class _Harness:
    def __init__(
        self,
        root: Path,
        *,
        bundler_runner: _BundlerRunner | None = None,
        alternate_command: str | None = "ranger",
        alternate_runner=None,
        answer: str = "n",
    ) -> None:
        self.now = 0.0
        self.said: list[str] = []
        self.asked: list[str] = []
        self.handoffs = 0
        self.bundler_runner = bundler_runner or _BundlerRunner()
        self.answer = answer

        @contextlib.contextmanager
        def handoff():
            self.handoffs += 1
            yield

        def ask(question: str) -> str:
            self.asked.append(question)
            return self.answer

        self.controller = NavigationController(
            root,
            load_ignore_patterns(root),
            BundleInvoker(("repomix",), root, runner=self.bundler_runner),
            StatsAggregator(HeuristicTokenizer()),
            PreviewRenderer(None),
            AlternateSelector(
                alternate_command,
                root,
                runner=alternate_runner or (lambda argv, **kwargs: subprocess.CompletedProcess(argv, 0)),
            ),
            page_size=10,
            status_seconds=3.0,
            terminal_handoff=handoff,
            ask=ask,
            say=self.said.append,
            clock=lambda: self.now,
        )
        self.controller.start()

    def press(self, *commands: Command) -> None:
        for command in commands:
            self.controller.handle(Event(command))

    def type_text(self, text: str) -> None:
        for ch in text:
            self.controller.handle(Event(Command.PROMPT_INSERT, ch))

    def select_named(self, name: str) -> None:
        names = [entry.name for entry in self.controller.entries]
        self.controller.viewport.cursor_index = names.index(name)


class EmptyCommitTests(unittest.TestCase):
    def test_run_with_empty_selection_exits_without_spawning(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            root = Path(tmp).resolve()
            _touch(root / "a.py")
            harness = _Harness(root)

            harness.press(Command.RUN_BUNDLE)

            controller = harness.controller
            self.assertEqual(controller.mode, Mode.EXITED)
            self.assertEqual((controller.exit_code, controller.exit_message), (0, NO_FILES_MESSAGE))
            self.assertEqual(harness.bundler_runner.calls, [])
            self.assertEqual(harness.handoffs, 0)

    def test_clipboard_with_empty_selection_exits_without_spawning(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            harness = _Harness(Path(tmp).resolve())
            harness.press(Command.RUN_BUNDLE_TO_CLIPBOARD)
            self.assertEqual(harness.controller.exit_message, NO_FILES_MESSAGE)
            self.assertEqual(harness.bundler_runner.calls, [])


class SelectionScenarioTests(unittest.TestCase):
    def test_ignored_entry_is_listed_but_cannot_be_selected(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            root = Path(tmp).resolve()
            _touch(root / ".gitignore", "b.txt\n")
            _touch(root / "a.txt")
            _touch(root / "b.txt")
            harness = _Harness(root)
            controller = harness.controller

            names = {entry.name: entry for entry in controller.entries}
            self.assertTrue(names["b.txt"].ignored)
            harness.select_named("b.txt")
            harness.press(Command.TOGGLE_SELECT)

            self.assertEqual(controller.selection.size(), 0)
            self.assertIn("ignored", controller.status_message)
            self.assertEqual(controller.mode, Mode.BROWSING)

    def test_file_toggle_updates_selection_flags_and_stats(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            root = Path(tmp).resolve()
            _touch(root / "a.py", "a = 1\nb = 2\n")
            harness = _Harness(root)
            controller = harness.controller

            harness.press(Command.TOGGLE_SELECT)
            self.assertTrue(controller.entries[0].selected)
            self.assertEqual(controller.stats.file_count, 1)
            self.assertEqual(controller.stats.total_lines, 2)

            harness.press(Command.TOGGLE_SELECT)
            self.assertFalse(controller.entries[0].selected)
            self.assertEqual(controller.selection.size(), 0)
            self.assertEqual(controller.stats.file_count, 0)

    def test_directory_toggle_marks_subtree_and_direct_run_includes_all_files(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            root = Path(tmp).resolve()
            for name in ("a.py", "b.py", "c.py"):
                _touch(root / "src" / name)
            harness = _Harness(root)
            controller = harness.controller

            harness.select_named("src")
            harness.press(Command.TOGGLE_SELECT)

            self.assertTrue(controller.entries[0].selected)
            self.assertEqual(controller.stats.file_count, 3)
            self.assertEqual(
                sorted(controller.bundler.relative_paths(controller.selection)),
                ["src/a.py", "src/b.py", "src/c.py"],
            )

            harness.press(Command.RUN_BUNDLE)

            self.assertEqual(harness.handoffs, 1)
            argv = harness.bundler_runner.calls[0]
            self.assertEqual(argv[:2], ["repomix", "--include"])
            self.assertEqual(sorted(argv[2].split(",")), ["src/a.py", "src/b.py", "src/c.py"])
            self.assertEqual((controller.exit_code, controller.exit_message), (0, DIRECT_DONE_MESSAGE))
            self.assertIn("Running repomix with 3 selected files...", harness.said)

    def test_directory_toggle_twice_clears_subtree(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            root = Path(tmp).resolve()
            _touch(root / "src" / "a.py")
            _touch(root / "src" / "deep" / "b.py")
            harness = _Harness(root)

            harness.press(Command.TOGGLE_SELECT, Command.TOGGLE_SELECT)

            self.assertEqual(harness.controller.selection.size(), 0)
            self.assertFalse(harness.controller.entries[0].selected)


class BundleRunScenarioTests(unittest.TestCase):
    def test_direct_run_failure_exits_with_code_one(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            root = Path(tmp).resolve()
            _touch(root / "a.py")
            harness = _Harness(root, bundler_runner=_BundlerRunner(returncode=1, stderr="bad things"))

            harness.press(Command.TOGGLE_SELECT, Command.RUN_BUNDLE)

            controller = harness.controller
            self.assertEqual(controller.mode, Mode.EXITED)
            self.assertEqual(controller.exit_code, 1)
            self.assertIn("Failed to run repomix", controller.exit_message)
            self.assertIn("bad things", controller.exit_message)

    def test_clipboard_success_exits_with_message(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            root = Path(tmp).resolve()
            _touch(root / "a.py")
            harness = _Harness(root)

            harness.press(Command.TOGGLE_SELECT, Command.RUN_BUNDLE_TO_CLIPBOARD)

            self.assertEqual(harness.bundler_runner.calls[0][-1], "--copy")
            self.assertEqual(harness.controller.exit_message, CLIPBOARD_DONE_MESSAGE)
            self.assertEqual(harness.handoffs, 0)

    def test_clipboard_failure_stays_in_browsing_with_status(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            root = Path(tmp).resolve()
            _touch(root / "a.py")
            harness = _Harness(root, bundler_runner=_BundlerRunner(returncode=3, stderr="no clipboard"))

            harness.press(Command.TOGGLE_SELECT, Command.RUN_BUNDLE_TO_CLIPBOARD)

            controller = harness.controller
            self.assertEqual(controller.mode, Mode.BROWSING)
            self.assertIn("no clipboard", controller.status_message)
            self.assertEqual(controller.selection.size(), 1)

    def test_prompt_submission_runs_with_prompt_text(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            root = Path(tmp).resolve()
            _touch(root / "a.py")
            harness = _Harness(root, bundler_runner=_BundlerRunner(stdout="bundle ready"))
            controller = harness.controller

            harness.press(Command.TOGGLE_SELECT, Command.OPEN_PROMPT)
            self.assertEqual(controller.mode, Mode.PROMPT_INPUT)
            harness.type_text("fix bugx")
            harness.press(Command.PROMPT_BACKSPACE)
            self.assertEqual(controller.prompt_text, "fix bug")
            harness.press(Command.PROMPT_SUBMIT)

            self.assertEqual(harness.bundler_runner.calls[0][-2:], ["--prompt", "fix bug"])
            self.assertEqual(controller.mode, Mode.EXITED)
            self.assertEqual(controller.exit_message, "bundle ready")
            self.assertEqual(controller.prompt_text, "")

    def test_prompt_cancel_returns_to_browsing(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            harness = _Harness(Path(tmp).resolve())
            harness.press(Command.OPEN_PROMPT)
            harness.type_text("draft")
            harness.press(Command.PROMPT_CANCEL)
            self.assertEqual(harness.controller.mode, Mode.BROWSING)
            self.assertEqual(harness.controller.prompt_text, "")
            self.assertEqual(harness.bundler_runner.calls, [])


class DirectoryNavigationTests(unittest.TestCase):
    def test_descend_and_ascend_relist(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            root = Path(tmp).resolve()
            _touch(root / "pkg" / "inner.py")
            _touch(root / "top.py")
            harness = _Harness(root)
            controller = harness.controller

            harness.select_named("pkg")
            harness.press(Command.DESCEND)
            self.assertEqual(controller.current_dir, root / "pkg")
            self.assertEqual([e.name for e in controller.entries], ["inner.py"])

            harness.press(Command.ASCEND)
            self.assertEqual(controller.current_dir, root)
            self.assertEqual([e.name for e in controller.entries], ["pkg", "top.py"])
            self.assertEqual(controller.viewport.cursor_index, 0)

    def test_unreadable_directory_keeps_prior_state(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            root = Path(tmp).resolve()
            (root / "gone").mkdir()
            _touch(root / "keep.py")
            harness = _Harness(root)
            controller = harness.controller

            (root / "gone").rmdir()
            harness.select_named("gone")
            harness.press(Command.DESCEND)

            self.assertEqual(controller.current_dir, root)
            self.assertEqual([e.name for e in controller.entries], ["gone", "keep.py"])
            self.assertIn("cannot read directory", controller.status_message)

    def test_paging_moves_by_page_size(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            root = Path(tmp).resolve()
            for idx in range(25):
                _touch(root / f"f{idx:02d}.py")
            harness = _Harness(root)
            controller = harness.controller

            harness.press(Command.PAGE_DOWN)
            self.assertEqual(controller.viewport.cursor_index, 10)
            harness.press(Command.JUMP_BOTTOM)
            self.assertEqual(controller.viewport.cursor_index, 24)
            controller.layout(list_rows=5, preview_rows=5)
            self.assertEqual(controller.viewport.scroll_offset, 20)


class PreviewScenarioTests(unittest.TestCase):
    def test_preview_opens_scrolls_and_closes(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            root = Path(tmp).resolve()
            _touch(root / "notes.txt", "".join(f"line {idx}\n" for idx in range(10)))
            harness = _Harness(root)
            controller = harness.controller

            harness.press(Command.PREVIEW)
            self.assertEqual(controller.mode, Mode.PREVIEW_OPEN)
            self.assertIsNotNone(controller.preview)
            self.assertTrue(controller.preview.diagnostic)

            controller.layout(list_rows=10, preview_rows=4)
            bottom = len(controller.preview.lines) + 1 - 4
            harness.press(Command.JUMP_BOTTOM)
            self.assertEqual(controller.preview_offset, bottom)
            harness.press(Command.MOVE_DOWN)
            self.assertEqual(controller.preview_offset, bottom)
            harness.press(Command.JUMP_TOP, Command.MOVE_UP)
            self.assertEqual(controller.preview_offset, 0)

            harness.press(Command.CLOSE_PREVIEW)
            self.assertEqual(controller.mode, Mode.BROWSING)
            self.assertIsNone(controller.preview)


class AlternateSelectorScenarioTests(unittest.TestCase):
    def _writing_runner(self, root: Path, paths: list[Path]):
        def runner(argv, **kwargs):
            (root / HANDOFF_FILENAME).write_text("".join(f"{p}\n" for p in paths), encoding="utf-8")
            return subprocess.CompletedProcess(argv, 0)

        return runner

    def test_handoff_replaces_selection_and_resumes_browsing(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            root = Path(tmp).resolve()
            first = _touch(root / "one.py")
            second = _touch(root / "two.py")
            stale = _touch(root / "stale.py")
            harness = _Harness(root, alternate_runner=self._writing_runner(root, [first, second]))
            controller = harness.controller
            controller.selection.add(stale)

            harness.press(Command.LAUNCH_ALTERNATE_SELECTOR)

            self.assertEqual(controller.selection.snapshot_paths(), (first, second))
            self.assertFalse((root / HANDOFF_FILENAME).exists())
            self.assertEqual(controller.mode, Mode.BROWSING)
            self.assertEqual(controller.status_message, "2 files selected from ranger")
            self.assertEqual(controller.stats.file_count, 2)
            self.assertEqual(harness.handoffs, 1)
            self.assertEqual(len(harness.asked), 1)

    def test_confirming_runs_bundler_and_exits(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            root = Path(tmp).resolve()
            first = _touch(root / "one.py")
            harness = _Harness(root, alternate_runner=self._writing_runner(root, [first]), answer="y")

            harness.press(Command.LAUNCH_ALTERNATE_SELECTOR)

            controller = harness.controller
            self.assertEqual(harness.bundler_runner.calls, [["repomix", "--include", "one.py"]])
            self.assertEqual((controller.mode, controller.exit_code), (Mode.EXITED, 0))

    def test_directory_marked_in_ranger_is_bundled(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            root = Path(tmp).resolve()
            _touch(root / "src" / "a.py")
            first = _touch(root / "one.py")
            harness = _Harness(
                root,
                alternate_runner=self._writing_runner(root, [root / "src", first]),
                answer="y",
            )

            harness.press(Command.LAUNCH_ALTERNATE_SELECTOR)

            controller = harness.controller
            self.assertEqual(harness.bundler_runner.calls, [["repomix", "--include", "src,one.py"]])
            self.assertEqual(
                (controller.mode, controller.exit_code, controller.exit_message),
                (Mode.EXITED, 0, DIRECT_DONE_MESSAGE),
            )
            self.assertIn("Running repomix with 2 selected files...", harness.said)

    def test_nothing_marked_keeps_selection(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            root = Path(tmp).resolve()
            kept = _touch(root / "kept.py")
            harness = _Harness(root)
            harness.controller.selection.add(kept)

            harness.press(Command.LAUNCH_ALTERNATE_SELECTOR)

            self.assertEqual(harness.controller.selection.snapshot_paths(), (kept,))
            self.assertEqual(harness.controller.status_message, "No files selected in ranger.")
            self.assertEqual(harness.asked, [])

    def test_missing_ranger_sets_status(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            harness = _Harness(Path(tmp).resolve(), alternate_command=None)
            harness.press(Command.LAUNCH_ALTERNATE_SELECTOR)
            self.assertEqual(harness.controller.status_message, "Ranger is not installed!")
            self.assertEqual(harness.handoffs, 0)


class StatusAndHelpTests(unittest.TestCase):
    def test_status_expires_after_configured_seconds(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            harness = _Harness(Path(tmp).resolve())
            controller = harness.controller

            controller.set_status("hello")
            harness.now = 2.9
            self.assertFalse(controller.expire_status())
            harness.now = 3.0
            self.assertTrue(controller.expire_status())
            self.assertEqual(controller.status_message, "")

    def test_help_toggle_and_quit(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            harness = _Harness(Path(tmp).resolve())
            controller = harness.controller
            self.assertTrue(controller.show_help)
            harness.press(Command.TOGGLE_HELP)
            self.assertFalse(controller.show_help)
            harness.press(Command.QUIT)
            self.assertEqual((controller.mode, controller.exit_code, controller.exit_message), (Mode.EXITED, 0, ""))


if __name__ == "__main__":
    unittest.main()
