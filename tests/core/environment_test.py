import unittest

from minilisp.core.environment import Environment
from minilisp.core.expr import NIL, Int, Lambda, List, Pair


class EnvironmentTestCase(unittest.TestCase):

    def setUp(self):
        self.env = Environment.create_root()

    def test_create_root(self):
        self.assertEqual(1, len(self.env))
        self.assertIn(Environment.ROOT, self.env)
        self.assertIsNone(self.env.lookup(Environment.ROOT, "x"))

    def test_define_overwrites(self):
        self.env.define(Environment.ROOT, "x", Int(1))
        self.env.define(Environment.ROOT, "x", Int(2))
        self.assertEqual(Int(2), self.env.lookup(Environment.ROOT, "x"))

    def test_nil_binding_is_found(self):
        self.env.define(Environment.ROOT, "x", NIL)
        self.assertEqual(NIL, self.env.lookup(Environment.ROOT, "x"))

    def test_lookup_walks_chain(self):
        self.env.define(Environment.ROOT, "x", Int(1))
        child = self.env.extend(Environment.ROOT)
        grandchild = self.env.extend(child)
        self.env.define(child, "y", Int(2))

        self.assertEqual(Int(1), self.env.lookup(grandchild, "x"))
        self.assertEqual(Int(2), self.env.lookup(grandchild, "y"))
        self.assertIsNone(self.env.lookup(Environment.ROOT, "y"))
        self.assertIsNone(self.env.lookup(grandchild, "z"))

    def test_define_shadows(self):
        self.env.define(Environment.ROOT, "x", Int(1))
        child = self.env.extend(Environment.ROOT)
        self.env.define(child, "x", Int(2))

        self.assertEqual(Int(2), self.env.lookup(child, "x"))
        self.assertEqual(Int(1), self.env.lookup(Environment.ROOT, "x"))

    def test_release_reuses_slot(self):
        child = self.env.extend(Environment.ROOT)
        self.env.define(child, "x", Int(1))
        self.assertEqual(2, len(self.env))

        self.assertTrue(self.env.release(child))
        self.assertEqual(1, len(self.env))
        self.assertNotIn(child, self.env)
        self.assertRaises(KeyError, self.env.lookup, child, "x")

        reused = self.env.extend(Environment.ROOT)
        self.assertEqual(child, reused)
        self.assertIsNone(self.env.lookup(reused, "x"))

    def test_root_is_never_released(self):
        self.assertFalse(self.env.release(Environment.ROOT))
        self.assertIn(Environment.ROOT, self.env)

    def test_pin(self):
        child = self.env.extend(Environment.ROOT)
        grandchild = self.env.extend(child)
        sibling = self.env.extend(Environment.ROOT)

        self.env.pin(grandchild)
        self.assertFalse(self.env.release(grandchild))
        self.assertFalse(self.env.release(child))
        self.assertTrue(self.env.release(sibling))
        self.assertEqual(3, len(self.env))

    def test_collect_keeps_bound_closures(self):
        child = self.env.extend(Environment.ROOT)
        grandchild = self.env.extend(child)
        self.env.pin(grandchild)
        self.env.define(Environment.ROOT, "f", Lambda(["x"], (), grandchild))

        self.assertEqual(0, self.env.collect())
        self.assertEqual(3, len(self.env))
        self.assertEqual(grandchild, self.env.lookup(Environment.ROOT, "f").scope)

    def test_collect_frees_unreferenced_frames(self):
        captured = self.env.extend(Environment.ROOT)
        self.env.pin(captured)
        self.env.extend(captured)

        self.assertEqual(2, self.env.collect())
        self.assertEqual(1, len(self.env))
        self.assertNotIn(captured, self.env)

    def test_collect_keeps_values_and_scopes(self):
        held = self.env.extend(Environment.ROOT)
        nested = self.env.extend(Environment.ROOT)
        active = self.env.extend(Environment.ROOT)
        closure = Lambda([], (), nested)

        self.assertEqual(0, self.env.collect([active], [List([Int(1), Pair(NIL, Lambda([], (), held))]), closure]))
        self.assertEqual(4, len(self.env))

        self.assertEqual(3, self.env.collect())
        self.assertEqual(1, len(self.env))

    def test_extend_requires_live_parent(self):
        self.assertRaises(KeyError, self.env.extend, 5)


if __name__ == '__main__':
    unittest.main()
