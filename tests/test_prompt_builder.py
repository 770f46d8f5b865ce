from __future__ import annotations

import sys
from pathlib import Path
import unittest

PROJECT_ROOT = Path(__file__).resolve().parent.parent
API_CODE_PATH = PROJECT_ROOT / "api-code"
if str(API_CODE_PATH) not in sys.path:
    sys.path.insert(0, str(API_CODE_PATH))

from services.prompt_builder import (
    build_script_messages,
    build_style_messages,
    join_samples,
    script_token_budget,
)


class TokenBudgetTest(unittest.TestCase):
    def test_budget_is_clamped(self) -> None:
        cases = {
            0: 256,
            100: 256,
            192: 256,
            193: 257,
            400: 533,
            1000: 1333,
            1500: 2000,
            100000: 2000,
        }
        for length, expected in cases.items():
            with self.subTest(length=length):
                self.assertEqual(script_token_budget(length), expected)

    def test_negative_length_uses_minimum(self) -> None:
        self.assertEqual(script_token_budget(-50), 256)


class StyleMessagesTest(unittest.TestCase):
    def test_samples_are_enumerated(self) -> None:
        self.assertEqual(join_samples(["A", "B"]), "Sample 1:\nA\n\nSample 2:\nB")

    def test_single_sample_has_no_separator(self) -> None:
        self.assertEqual(join_samples(["only"]), "Sample 1:\nonly")

    def test_system_prompt_precedes_samples(self) -> None:
        messages = build_style_messages(["A"])
        self.assertEqual([m["role"] for m in messages], ["system", "user"])
        self.assertIn("5-7 bullet points", messages[0]["content"])


class ScriptMessagesTest(unittest.TestCase):
    def test_prompt_carries_length_and_intensity(self) -> None:
        system, user = build_script_messages("slow and warm", length=250, intensity=9)

        self.assertIn("Approximate length: 250 words.", system["content"])
        self.assertIn("Intensity 1-10: 9 (1 = light relaxation, 10 = profound trance).", system["content"])
        self.assertIn("induction, deepening, themed body, and gentle exit", system["content"])
        self.assertEqual(user["content"], "Master style:\nslow and warm")

    def test_theme_line_comes_first(self) -> None:
        _, user = build_script_messages("slow", length=400, intensity=6, theme="sleep")
        self.assertEqual(user["content"], "Theme or focus: sleep\n\nMaster style:\nslow")

    def test_blank_theme_is_omitted(self) -> None:
        _, user = build_script_messages("slow", length=400, intensity=6, theme="")
        self.assertEqual(user["content"], "Master style:\nslow")


if __name__ == "__main__":
    unittest.main()
