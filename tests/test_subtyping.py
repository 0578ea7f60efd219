import unittest

from subtle.calculus import TOP, BOOL, UNIT, BaseType, ArrowType, ProductType, record
from subtle.subtyping import is_subtype, is_equivalent, join, meet, require_meet
from subtle.diagnostics import NoMeet

STRING = BaseType("String")
NAT = BaseType("Nat")
PERSON = record(("name", STRING), ("age", NAT))
STUDENT = record(("name", STRING), ("age", NAT), ("gpa", NAT))
LEAVES = [TOP, BOOL, UNIT, STRING, NAT]

class SubtypeRuleTests(unittest.TestCase):

	def test_top_is_above_everything_and_below_only_itself(self):
		for t in LEAVES + [PERSON, ArrowType(BOOL, UNIT), ProductType(NAT, NAT)]:
			with self.subTest(t=t):
				self.assertTrue(is_subtype(t, TOP))
				self.assertEqual(t == TOP, is_subtype(TOP, t))

	def test_leaves_are_mutually_unrelated(self):
		for s in LEAVES[1:]:
			for t in LEAVES[1:]:
				with self.subTest(s=s, t=t):
					self.assertEqual(s == t, is_subtype(s, t))

	def test_arrows_are_contravariant_then_covariant(self):
		self.assertTrue(is_subtype(ArrowType(TOP, BOOL), ArrowType(BOOL, TOP)))
		self.assertFalse(is_subtype(ArrowType(BOOL, BOOL), ArrowType(TOP, BOOL)))
		self.assertTrue(is_subtype(ArrowType(PERSON, BOOL), ArrowType(STUDENT, BOOL)))
		self.assertFalse(is_subtype(ArrowType(STUDENT, BOOL), ArrowType(PERSON, BOOL)))
		self.assertFalse(is_subtype(ArrowType(BOOL, BOOL), ProductType(BOOL, BOOL)))

	def test_products_are_covariant(self):
		self.assertTrue(is_subtype(ProductType(STUDENT, BOOL), ProductType(PERSON, TOP)))
		self.assertFalse(is_subtype(ProductType(PERSON, BOOL), ProductType(STUDENT, BOOL)))

	def test_width_depth_and_permutation_at_once(self):
		wide = record(("name", STRING), ("age", NAT), ("gpa", NAT))
		narrow = record(("age", NAT), ("name", STRING))
		self.assertTrue(is_subtype(wide, narrow))
		self.assertFalse(is_subtype(narrow, wide))

	def test_depth(self):
		self.assertTrue(is_subtype(record(("who", STUDENT)), record(("who", PERSON))))
		self.assertTrue(is_subtype(record(("who", STUDENT)), record(("who", TOP))))
		self.assertFalse(is_subtype(record(("who", PERSON)), record(("who", STUDENT))))

	def test_empty_record_is_the_top_of_records(self):
		self.assertTrue(is_subtype(PERSON, record()))
		self.assertFalse(is_subtype(record(), PERSON))
		self.assertFalse(is_subtype(BOOL, record()))

	def test_equivalence(self):
		self.assertTrue(is_equivalent(PERSON, record(("age", NAT), ("name", STRING))))
		self.assertFalse(is_equivalent(STUDENT, PERSON))


class LatticeTests(unittest.TestCase):

	def test_join_of_related_types_is_the_larger(self):
		self.assertEqual(PERSON, join(STUDENT, PERSON))
		self.assertEqual(PERSON, join(PERSON, STUDENT))
		self.assertEqual(BOOL, join(BOOL, BOOL))

	def test_join_of_unrelated_leaves_is_top(self):
		self.assertIs(TOP, join(BOOL, UNIT))
		self.assertIs(TOP, join(STRING, NAT))
		self.assertIs(TOP, join(PERSON, ArrowType(BOOL, BOOL)))

	def test_join_of_records_keeps_common_fields(self):
		a = record(("name", STRING), ("age", NAT))
		b = record(("age", NAT), ("gpa", NAT))
		self.assertEqual(record(("age", NAT)), join(a, b))
		c = record(("x", BOOL), ("y", STUDENT))
		d = record(("y", PERSON), ("x", UNIT))
		self.assertEqual(record(("x", TOP), ("y", PERSON)), join(c, d))

	def test_join_of_products(self):
		self.assertEqual(ProductType(TOP, STRING), join(ProductType(BOOL, STRING), ProductType(UNIT, STRING)))

	def test_join_of_arrows_meets_the_domains(self):
		f = ArrowType(record(("a", BOOL)), STUDENT)
		g = ArrowType(record(("b", UNIT)), record(("name", STRING), ("x", BOOL)))
		expect = ArrowType(record(("a", BOOL), ("b", UNIT)), record(("name", STRING)))
		self.assertEqual(expect, join(f, g))

	def test_join_of_arrows_with_unrelated_domains_is_top(self):
		self.assertIs(TOP, join(ArrowType(BOOL, BOOL), ArrowType(UNIT, UNIT)))
		self.assertIs(TOP, join(ArrowType(STRING, BOOL), ArrowType(NAT, BOOL)))

	def test_meet_of_related_types_is_the_smaller(self):
		self.assertEqual(STUDENT, meet(STUDENT, PERSON))
		self.assertEqual(BOOL, meet(TOP, BOOL))

	def test_meet_of_records_takes_all_fields(self):
		a = record(("name", STRING), ("age", NAT))
		b = record(("age", NAT), ("gpa", NAT))
		self.assertEqual(STUDENT, meet(a, b))

	def test_meet_of_arrows_joins_the_domains(self):
		self.assertEqual(ArrowType(TOP, BOOL), meet(ArrowType(STRING, BOOL), ArrowType(NAT, BOOL)))

	def test_no_meet(self):
		self.assertIsNone(meet(BOOL, UNIT))
		self.assertIsNone(meet(BOOL, record()))
		self.assertIsNone(meet(record(("a", BOOL)), record(("a", UNIT))))
		self.assertIsNone(meet(ArrowType(BOOL, BOOL), ArrowType(BOOL, UNIT)))
		self.assertIsNone(meet(ProductType(BOOL, NAT), ProductType(BOOL, STRING)))
		self.assertIsNone(meet(PERSON, ArrowType(BOOL, BOOL)))

	def test_require_meet(self):
		self.assertEqual(STUDENT, require_meet(STUDENT, PERSON))
		with self.assertRaises(NoMeet) as cm:
			require_meet(STRING, NAT)
		self.assertEqual("NoMeet", cm.exception.kind)
		self.assertIsNone(cm.exception.term)


if __name__ == '__main__':
	unittest.main()
