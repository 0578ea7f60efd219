"""
Algorithmic type-checking with subtypes.

The declarative typing relation has a free-standing subsumption rule,
which may be applied anywhere, any number of times. That is a fine way
to specify a type system and a lousy way to check one.

So instead, synthesis always computes the *minimal* type of a term,
and never forgets anything on its own. Subtyping enters only at the
points where some other type is genuinely demanded:

* The argument of an application must be a subtype of the domain.
* The branches of a conditional meet at their join.
* An ascription demands a supertype on purpose.

Because synthesis is minimal, the type of a function position is already
an arrow (or else nothing callable at all), so there is never any guessing
about how to decompose a type into an arrow. The same goes for pairs and
records under projection.

Each check is terminal at the first failure, which carries the guilty sub-term.
"""
from boozetools.support.foundation import Visitor
from . import syntax
from .calculus import SubtleType, ArrowType, ProductType, RecordType, BOOL, UNIT
from .context import Context, EMPTY
from .subtyping import is_subtype, join
from .diagnostics import (
	UnboundVariable, NotAFunction, ArgumentTypeMismatch, ConditionNotBool, NotAPair,
	NotARecord, MissingField, DuplicateLabel, AscriptionMismatch,
)

class TypeChecker(Visitor):
	""" Synthesis, one case per term form. Holds no state between calls. """

	def synthesize(self, ctx:Context, term:syntax.Term) -> SubtleType:
		typ = self.visit(term, ctx)
		assert isinstance(typ, SubtleType), (term, typ)
		return typ

	@staticmethod
	def visit_Var(term:syntax.Var, ctx:Context):
		try: return ctx.lookup(term.name)
		except KeyError: raise UnboundVariable(term, "No binding for '%s' here."%term.name) from None

	def visit_Abs(self, term:syntax.Abs, ctx:Context):
		inner = ctx.extend(term.param, term.param_type)
		return ArrowType(term.param_type, self.synthesize(inner, term.body))

	def visit_App(self, term:syntax.App, ctx:Context):
		fn_type = self.synthesize(ctx, term.fn)
		if not isinstance(fn_type, ArrowType):
			raise NotAFunction(term.fn, "Dunno how to call %r as a function."%fn_type)
		arg_type = self.synthesize(ctx, term.arg)
		if not is_subtype(arg_type, fn_type.domain):
			raise ArgumentTypeMismatch(term.arg, "Got %r where %r was expected."%(arg_type, fn_type.domain))
		return fn_type.codomain

	@staticmethod
	def visit_TrueLit(_, __): return BOOL
	@staticmethod
	def visit_FalseLit(_, __): return BOOL
	@staticmethod
	def visit_UnitVal(_, __): return UNIT
	@staticmethod
	def visit_Constant(term:syntax.Constant, _): return term.base

	def visit_If(self, term:syntax.If, ctx:Context):
		# Bool has no supertype but Top, so exact equality is the right test here.
		cond_type = self.synthesize(ctx, term.cond)
		if cond_type != BOOL:
			raise ConditionNotBool(term.cond, "The condition is %r, not Bool."%cond_type)
		return join(self.synthesize(ctx, term.then_part), self.synthesize(ctx, term.else_part))

	def visit_Pair(self, term:syntax.Pair, ctx:Context):
		return ProductType(self.synthesize(ctx, term.first), self.synthesize(ctx, term.second))

	def _product(self, term:syntax.Term, ctx:Context) -> ProductType:
		typ = self.synthesize(ctx, term)
		if not isinstance(typ, ProductType):
			raise NotAPair(term, "This %r has not the product nature."%typ)
		return typ

	def visit_Fst(self, term:syntax.Fst, ctx:Context):
		return self._product(term.pair, ctx).first

	def visit_Snd(self, term:syntax.Snd, ctx:Context):
		return self._product(term.pair, ctx).second

	def visit_RecordLit(self, term:syntax.RecordLit, ctx:Context):
		seen = set()
		fields = []
		for label, sub_term in term.fields:
			if label in seen:
				raise DuplicateLabel(term, "The label '%s' appears more than once."%label)
			seen.add(label)
			fields.append((label, self.synthesize(ctx, sub_term)))
		return RecordType(fields)

	def visit_Proj(self, term:syntax.Proj, ctx:Context):
		typ = self.synthesize(ctx, term.subject)
		if not isinstance(typ, RecordType):
			raise NotARecord(term.subject, "This %r has no fields; in particular not '%s'."%(typ, term.label))
		if not typ.has(term.label):
			raise MissingField(term, "Type %r has fields, but not one called '%s'."%(typ, term.label))
		return typ.field(term.label)

	def visit_Ascribe(self, term:syntax.Ascribe, ctx:Context):
		self.check(ctx, term.term, term.ascription)
		return term.ascription

	def check(self, ctx:Context, term:syntax.Term, expected:SubtleType) -> SubtleType:
		""" Checking mode: synthesize, then demand a subtype of what's expected. """
		typ = self.synthesize(ctx, term)
		if not is_subtype(typ, expected):
			raise AscriptionMismatch(term, "This %r needs to be a(n) %r."%(typ, expected))
		return typ

_CHECKER = TypeChecker()

def type_of(ctx:Context, term:syntax.Term) -> SubtleType:
	""" The minimal type of `term` under `ctx`, or else a TypeCheckError. """
	return _CHECKER.synthesize(ctx, term)

def check(ctx:Context, term:syntax.Term, expected:SubtleType) -> SubtleType:
	return _CHECKER.check(ctx, term, expected)

def type_of_closed(term:syntax.Term) -> SubtleType:
	return type_of(EMPTY, term)
