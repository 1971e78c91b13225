import unittest

from marks_core import RepeatKeyGesture


class RepeatKeyGestureTests(unittest.TestCase):
    def setUp(self) -> None:
        self.gesture = RepeatKeyGesture(("d", "y"))

    def test_double_press_fires_once(self) -> None:
        self.assertIsNone(self.gesture.feed("y"))
        self.assertEqual(self.gesture.feed("y"), "y")
        self.assertIsNone(self.gesture.armed)

    def test_third_press_only_arms_again(self) -> None:
        fired = [self.gesture.feed("d") for _ in range(4)]
        self.assertEqual(fired, [None, "d", None, "d"])

    def test_unrelated_key_between_presses_disarms(self) -> None:
        self.assertIsNone(self.gesture.feed("y"))
        self.assertIsNone(self.gesture.feed("j"))
        self.assertIsNone(self.gesture.feed("y"))
        self.assertEqual(self.gesture.armed, "y")

    def test_non_character_key_disarms(self) -> None:
        self.gesture.feed("d")
        self.assertIsNone(self.gesture.feed(None))
        self.assertIsNone(self.gesture.feed("d"))

    def test_other_trigger_disarms_without_arming(self) -> None:
        fired = [self.gesture.feed(key) for key in "dyy"]
        self.assertEqual(fired, [None, None, None])
        self.assertEqual(self.gesture.armed, "y")
        self.assertEqual(self.gesture.feed("y"), "y")

    def test_yank_then_double_delete_does_not_delete(self) -> None:
        fired = [self.gesture.feed(key) for key in "ydd"]
        self.assertEqual(fired, [None, None, None])

    def test_reset(self) -> None:
        self.gesture.feed("d")
        self.gesture.reset()
        self.assertIsNone(self.gesture.feed("d"))


if __name__ == "__main__":
    unittest.main()
