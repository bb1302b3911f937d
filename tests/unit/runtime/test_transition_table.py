"""Tests for the pure mode/effect transition table."""

from __future__ import annotations

import unittest

from cherrypiq.bundler import BundleMode
from cherrypiq.runtime.transitions import (
    Ascend,
    ClearPrompt,
    ClosePreview,
    Command,
    Descend,
    EditPrompt,
    Event,
    LaunchAlternate,
    Mode,
    Move,
    OpenPreview,
    Page,
    Quit,
    RejectIgnored,
    RunBundle,
    ScrollPreview,
    ToggleEntry,
    ToggleHelp,
    TransitionInput,
    plan_transition,
)

FILE = TransitionInput(Mode.BROWSING, has_entry=True)
DIRECTORY = TransitionInput(Mode.BROWSING, has_entry=True, entry_is_dir=True)
IGNORED = TransitionInput(Mode.BROWSING, has_entry=True, entry_ignored=True)
EMPTY = TransitionInput(Mode.BROWSING)


class BrowsingTransitionTests(unittest.TestCase):
    def test_movement_commands_stay_in_browsing(self) -> None:
        cases = {
            Command.MOVE_DOWN: Move(1),
            Command.MOVE_UP: Move(-1),
            Command.PAGE_DOWN: Page(1),
            Command.PAGE_UP: Page(-1),
            Command.ASCEND: Ascend(),
            Command.TOGGLE_HELP: ToggleHelp(),
            Command.LAUNCH_ALTERNATE_SELECTOR: LaunchAlternate(),
        }
        for command, effect in cases.items():
            with self.subTest(command=command):
                transition = plan_transition(FILE, Event(command))
                self.assertEqual(transition.next_mode, Mode.BROWSING)
                self.assertEqual(transition.effects, (effect,))

    def test_toggle_on_ignored_entry_is_rejected(self) -> None:
        transition = plan_transition(IGNORED, Event(Command.TOGGLE_SELECT))
        self.assertEqual(transition.effects, (RejectIgnored(),))

    def test_toggle_on_regular_entry(self) -> None:
        self.assertEqual(plan_transition(FILE, Event(Command.TOGGLE_SELECT)).effects, (ToggleEntry(),))

    def test_descend_only_applies_to_directories(self) -> None:
        self.assertEqual(plan_transition(DIRECTORY, Event(Command.DESCEND)).effects, (Descend(),))
        self.assertEqual(plan_transition(FILE, Event(Command.DESCEND)).effects, ())

    def test_preview_only_applies_to_files(self) -> None:
        opened = plan_transition(FILE, Event(Command.PREVIEW))
        self.assertEqual(opened.next_mode, Mode.PREVIEW_OPEN)
        self.assertEqual(opened.effects, (OpenPreview(),))
        ignored = plan_transition(DIRECTORY, Event(Command.PREVIEW))
        self.assertEqual((ignored.next_mode, ignored.effects), (Mode.BROWSING, ()))

    def test_empty_listing_ignores_entry_commands(self) -> None:
        for command in (Command.TOGGLE_SELECT, Command.DESCEND, Command.PREVIEW):
            with self.subTest(command=command):
                self.assertEqual(plan_transition(EMPTY, Event(command)).effects, ())

    def test_run_commands_plan_bundle_effects(self) -> None:
        self.assertEqual(
            plan_transition(EMPTY, Event(Command.RUN_BUNDLE)).effects,
            (RunBundle(BundleMode.DIRECT),),
        )
        self.assertEqual(
            plan_transition(EMPTY, Event(Command.RUN_BUNDLE_TO_CLIPBOARD)).effects,
            (RunBundle(BundleMode.CLIPBOARD),),
        )

    def test_quit_and_open_prompt_change_mode(self) -> None:
        quit_ = plan_transition(FILE, Event(Command.QUIT))
        self.assertEqual((quit_.next_mode, quit_.effects), (Mode.EXITED, (Quit(),)))
        prompt = plan_transition(FILE, Event(Command.OPEN_PROMPT))
        self.assertEqual((prompt.next_mode, prompt.effects), (Mode.PROMPT_INPUT, (ClearPrompt(),)))

    def test_close_preview_outside_preview_is_noop(self) -> None:
        transition = plan_transition(FILE, Event(Command.CLOSE_PREVIEW))
        self.assertEqual((transition.next_mode, transition.effects), (Mode.BROWSING, ()))


class PreviewTransitionTests(unittest.TestCase):
    def setUp(self) -> None:
        self.snapshot = TransitionInput(Mode.PREVIEW_OPEN, has_entry=True)

    def test_close_returns_to_browsing(self) -> None:
        for command in (Command.CLOSE_PREVIEW, Command.PREVIEW):
            with self.subTest(command=command):
                transition = plan_transition(self.snapshot, Event(command))
                self.assertEqual(transition.next_mode, Mode.BROWSING)
                self.assertEqual(transition.effects, (ClosePreview(),))

    def test_movement_scrolls_preview(self) -> None:
        self.assertEqual(
            plan_transition(self.snapshot, Event(Command.MOVE_DOWN)).effects,
            (ScrollPreview(lines=1),),
        )
        self.assertEqual(
            plan_transition(self.snapshot, Event(Command.JUMP_BOTTOM)).effects,
            (ScrollPreview(edge=1),),
        )

    def test_selection_commands_do_not_apply(self) -> None:
        transition = plan_transition(self.snapshot, Event(Command.TOGGLE_SELECT))
        self.assertEqual((transition.next_mode, transition.effects), (Mode.PREVIEW_OPEN, ()))

    def test_quit_closes_and_exits(self) -> None:
        transition = plan_transition(self.snapshot, Event(Command.QUIT))
        self.assertEqual(transition.next_mode, Mode.EXITED)
        self.assertEqual(transition.effects, (ClosePreview(), Quit()))


class PromptTransitionTests(unittest.TestCase):
    def test_insert_and_backspace_edit_prompt(self) -> None:
        snapshot = TransitionInput(Mode.PROMPT_INPUT, prompt_text="ab")
        self.assertEqual(
            plan_transition(snapshot, Event(Command.PROMPT_INSERT, "c")).effects,
            (EditPrompt(insert="c"),),
        )
        self.assertEqual(
            plan_transition(snapshot, Event(Command.PROMPT_BACKSPACE)).effects,
            (EditPrompt(backspace=True),),
        )

    def test_submit_runs_bundle_with_trimmed_prompt(self) -> None:
        snapshot = TransitionInput(Mode.PROMPT_INPUT, prompt_text="  explain this  ")
        transition = plan_transition(snapshot, Event(Command.PROMPT_SUBMIT))
        self.assertEqual(transition.next_mode, Mode.BROWSING)
        self.assertEqual(transition.effects, (ClearPrompt(), RunBundle(BundleMode.PROMPT, "explain this")))

    def test_submit_with_blank_prompt_just_closes(self) -> None:
        snapshot = TransitionInput(Mode.PROMPT_INPUT, prompt_text="   ")
        transition = plan_transition(snapshot, Event(Command.PROMPT_SUBMIT))
        self.assertEqual((transition.next_mode, transition.effects), (Mode.BROWSING, (ClearPrompt(),)))

    def test_cancel_discards_text(self) -> None:
        snapshot = TransitionInput(Mode.PROMPT_INPUT, prompt_text="draft")
        transition = plan_transition(snapshot, Event(Command.PROMPT_CANCEL))
        self.assertEqual((transition.next_mode, transition.effects), (Mode.BROWSING, (ClearPrompt(),)))

    def test_browsing_commands_do_not_apply_in_prompt(self) -> None:
        snapshot = TransitionInput(Mode.PROMPT_INPUT)
        self.assertEqual(plan_transition(snapshot, Event(Command.QUIT)).effects, ())


class ExitedTransitionTests(unittest.TestCase):
    def test_exited_is_terminal(self) -> None:
        snapshot = TransitionInput(Mode.EXITED)
        transition = plan_transition(snapshot, Event(Command.MOVE_DOWN))
        self.assertEqual((transition.next_mode, transition.effects), (Mode.EXITED, ()))


if __name__ == "__main__":
    unittest.main()
