import unittest

from subtle.syntax import Var, Abs, App, If, Pair, Fst, Snd, Proj, Ascribe, Constant, RecordLit, record_lit, TRUE, FALSE, UNIT_VAL
from subtle.calculus import TOP, BOOL, UNIT, BaseType, ArrowType, ProductType, record, arrows
from subtle.context import EMPTY
from subtle.type_checker import type_of, type_of_closed, check
from subtle.diagnostics import (
	TypeCheckError, UnboundVariable, NotAFunction, ArgumentTypeMismatch, ConditionNotBool,
	NotAPair, NotARecord, MissingField, DuplicateLabel, AscriptionMismatch,
)

STRING = BaseType("String")
NAT = BaseType("Nat")
PERSON = record(("name", STRING), ("age", NAT))
STUDENT = record(("name", STRING), ("age", NAT), ("gpa", NAT))

def student():
	return record_lit(name=Constant("Ada", STRING), age=Constant("36", NAT), gpa=Constant("4", NAT))

class SynthesisTests(unittest.TestCase):

	def test_literals(self):
		self.assertIs(BOOL, type_of_closed(TRUE))
		self.assertIs(BOOL, type_of_closed(FALSE))
		self.assertIs(UNIT, type_of_closed(UNIT_VAL))
		self.assertEqual(NAT, type_of_closed(Constant("7", NAT)))

	def test_variables_come_from_context(self):
		ctx = EMPTY.extend("x", STUDENT)
		self.assertEqual(STUDENT, type_of(ctx, Var("x")))

	def test_abstraction(self):
		self.assertEqual(ArrowType(BOOL, BOOL), type_of_closed(Abs("x", BOOL, Var("x"))))

	def test_inner_binding_shadows(self):
		term = Abs("x", BOOL, Abs("x", UNIT, Var("x")))
		self.assertEqual(arrows(BOOL, UNIT, UNIT), type_of_closed(term))

	def test_synthesis_is_minimal(self):
		# Nothing here forgets the extra field.
		self.assertEqual(STUDENT, type_of_closed(student()))
		self.assertEqual(ProductType(STUDENT, BOOL), type_of_closed(Pair(student(), TRUE)))

	def test_wider_record_passes_for_narrower_parameter(self):
		r = Var("r")
		fn = Abs("r", PERSON, Pair(Proj(r, "name"), Proj(r, "age")))
		self.assertEqual(ProductType(STRING, NAT), type_of_closed(App(fn, student())))

	def test_higher_order_arguments_are_contravariant(self):
		f = Var("f")
		takes_student_fn = Abs("f", ArrowType(STUDENT, BOOL), App(f, student()))
		person_fn = Abs("p", PERSON, TRUE)
		self.assertIs(BOOL, type_of_closed(App(takes_student_fn, person_fn)))

	def test_conditional_joins_its_branches(self):
		term = If(FALSE, student(), Ascribe(student(), PERSON))
		self.assertEqual(PERSON, type_of_closed(term))

	def test_conditional_with_unrelated_domains_is_top_not_an_error(self):
		term = If(TRUE, Abs("x", BOOL, Var("x")), Abs("x", UNIT, Var("x")))
		self.assertIs(TOP, type_of_closed(term))

	def test_conditional_with_related_arrows(self):
		term = If(TRUE, Abs("p", PERSON, Proj(Var("p"), "age")), Abs("s", STUDENT, Proj(Var("s"), "gpa")))
		self.assertEqual(ArrowType(STUDENT, NAT), type_of_closed(term))

	def test_projections(self):
		self.assertIs(BOOL, type_of_closed(Fst(Pair(TRUE, UNIT_VAL))))
		self.assertIs(UNIT, type_of_closed(Snd(Pair(TRUE, UNIT_VAL))))
		self.assertEqual(NAT, type_of_closed(Proj(student(), "gpa")))

	def test_ascription_widens(self):
		self.assertEqual(PERSON, type_of_closed(Ascribe(student(), PERSON)))
		self.assertIs(TOP, type_of_closed(Ascribe(TRUE, TOP)))

	def test_checking_mode(self):
		self.assertEqual(STUDENT, check(EMPTY, student(), PERSON))
		with self.assertRaises(AscriptionMismatch):
			check(EMPTY, TRUE, UNIT)


class TypeErrorTests(unittest.TestCase):

	def expect(self, kind, term, guilty, ctx=EMPTY):
		with self.assertRaises(kind) as cm:
			type_of(ctx, term)
		self.assertIsInstance(cm.exception, TypeCheckError)
		self.assertEqual(kind.__name__, cm.exception.kind)
		self.assertEqual(guilty, cm.exception.term)
		return cm.exception

	def test_unbound_variable(self):
		self.expect(UnboundVariable, Abs("x", BOOL, Var("y")), Var("y"))

	def test_scope_ends_with_the_abstraction(self):
		term = App(Abs("x", BOOL, Var("x")), Var("x"))
		self.expect(UnboundVariable, term, Var("x"))

	def test_not_a_function(self):
		self.expect(NotAFunction, App(TRUE, FALSE), TRUE)
		self.expect(NotAFunction, App(Ascribe(Abs("x", BOOL, Var("x")), TOP), TRUE), Ascribe(Abs("x", BOOL, Var("x")), TOP))

	def test_argument_type_mismatch(self):
		fn = Abs("r", PERSON, Proj(Var("r"), "age"))
		arg = record_lit(name=Constant("Ada", STRING))
		ex = self.expect(ArgumentTypeMismatch, App(fn, arg), arg)
		self.assertIn("{name:String}", ex.message)

	def test_arguments_are_not_contravariant_the_wrong_way(self):
		takes_person_fn = Abs("f", ArrowType(PERSON, BOOL), TRUE)
		student_fn = Abs("s", STUDENT, TRUE)
		self.expect(ArgumentTypeMismatch, App(takes_person_fn, student_fn), student_fn)

	def test_condition_not_bool(self):
		self.expect(ConditionNotBool, If(UNIT_VAL, TRUE, FALSE), UNIT_VAL)
		self.expect(ConditionNotBool, If(Ascribe(TRUE, TOP), TRUE, FALSE), Ascribe(TRUE, TOP))

	def test_not_a_pair(self):
		self.expect(NotAPair, Fst(TRUE), TRUE)
		self.expect(NotAPair, Snd(student()), student())

	def test_not_a_record(self):
		self.expect(NotARecord, Proj(Pair(TRUE, TRUE), "name"), Pair(TRUE, TRUE))

	def test_missing_field(self):
		term = Proj(Ascribe(student(), PERSON), "gpa")
		self.expect(MissingField, term, term)

	def test_duplicate_label(self):
		term = RecordLit([("a", TRUE), ("a", FALSE)])
		self.expect(DuplicateLabel, term, term)

	def test_ascription_mismatch(self):
		self.expect(AscriptionMismatch, Ascribe(record_lit(name=Constant("Ada", STRING)), PERSON), record_lit(name=Constant("Ada", STRING)))

	def test_checking_stops_at_the_first_failure(self):
		term = Pair(Var("nope"), Fst(TRUE))
		self.expect(UnboundVariable, term, Var("nope"))

	def test_errors_render(self):
		with self.assertRaises(TypeCheckError) as cm:
			type_of_closed(App(TRUE, FALSE))
		self.assertTrue(str(cm.exception).startswith("NotAFunction"))


if __name__ == '__main__':
	unittest.main()
