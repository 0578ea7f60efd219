"""
The subtype relation, and the lattice operations that ride along with it.

The declarative rules include reflexivity and transitivity as primitives,
which is no way to run a railroad: a search over them need not terminate.
Here each judgement S <: T is decided by structural recursion on both types at once.
Reflexivity falls out because equal types short-circuit;
transitivity falls out because every rule is compositional.
Neither is assumed: the soundness harness checks both.

Records get one rule that does the work of the three classical ones:
every field the right side demands must be found on the left, at a subtype.
Extra fields (width), narrower fields (depth), and reordering (permutation)
are all just consequences of looking fields up by label.

Join is total, because Top is always there to fall back on.
Meet is partial, because there is no bottom type:
two types with unlike constructors have no common subtype at all.

All three operations are double-dispatch visitors over the pair of types.
The visitors hold no state, so one instance of each serves every caller.
"""
from typing import Optional
from boozetools.support.foundation import Visitor
from .calculus import SubtleType, ArrowType, ProductType, RecordType, TOP
from .diagnostics import NoMeet

class Subsumption(Visitor):
	""" Decides this <: that, given that the two are not already equal and that is not Top. """

	def do(self, this:SubtleType, that:SubtleType) -> bool:
		if that is TOP or this.number == that.number: return True
		return self.visit(this, that)

	@staticmethod
	def visit__Top(_, __): return False
	@staticmethod
	def visit__Bool(_, __): return False
	@staticmethod
	def visit__Unit(_, __): return False
	@staticmethod
	def visit_BaseType(_, __): return False

	def visit_ArrowType(self, this:ArrowType, that:SubtleType):
		# Contravariant in the domain, covariant in the codomain.
		return (
			isinstance(that, ArrowType)
			and self.do(that.domain, this.domain)
			and self.do(this.codomain, that.codomain)
		)

	def visit_ProductType(self, this:ProductType, that:SubtleType):
		return (
			isinstance(that, ProductType)
			and self.do(this.first, that.first)
			and self.do(this.second, that.second)
		)

	def visit_RecordType(self, this:RecordType, that:SubtleType):
		if not isinstance(that, RecordType): return False
		for label, need in that.fields:
			if not (this.has(label) and self.do(this.field(label), need)):
				return False
		return True

class LeastUpperBound(Visitor):
	""" Each visit method sees two types, neither of which subsumes the other. """

	def do(self, this:SubtleType, that:SubtleType) -> SubtleType:
		if _SUBSUMPTION.do(this, that): return that
		if _SUBSUMPTION.do(that, this): return this
		return self.visit(this, that)

	@staticmethod
	def visit__Top(_, __): return TOP
	@staticmethod
	def visit__Bool(_, __): return TOP
	@staticmethod
	def visit__Unit(_, __): return TOP
	@staticmethod
	def visit_BaseType(_, __): return TOP

	def visit_ArrowType(self, this:ArrowType, that:SubtleType):
		if not isinstance(that, ArrowType): return TOP
		domain = _GLB.do(this.domain, that.domain)
		if domain is None:
			# No argument could satisfy both functions, so no arrow covers both.
			return TOP
		return ArrowType(domain, self.do(this.codomain, that.codomain))

	def visit_ProductType(self, this:ProductType, that:SubtleType):
		if not isinstance(that, ProductType): return TOP
		return ProductType(self.do(this.first, that.first), self.do(this.second, that.second))

	def visit_RecordType(self, this:RecordType, that:SubtleType):
		if not isinstance(that, RecordType): return TOP
		return RecordType(
			(label, self.do(typ, that.field(label)))
			for label, typ in this.fields
			if that.has(label)
		)

class GreatestLowerBound(Visitor):
	""" Answers None for "no meet". Each visit method sees two mutually unrelated types. """

	def do(self, this:SubtleType, that:SubtleType) -> Optional[SubtleType]:
		if _SUBSUMPTION.do(this, that): return this
		if _SUBSUMPTION.do(that, this): return that
		return self.visit(this, that)

	@staticmethod
	def visit__Top(_, __): return None
	@staticmethod
	def visit__Bool(_, __): return None
	@staticmethod
	def visit__Unit(_, __): return None
	@staticmethod
	def visit_BaseType(_, __): return None

	def visit_ArrowType(self, this:ArrowType, that:SubtleType):
		if not isinstance(that, ArrowType): return None
		codomain = self.do(this.codomain, that.codomain)
		if codomain is None: return None
		return ArrowType(_LUB.do(this.domain, that.domain), codomain)

	def visit_ProductType(self, this:ProductType, that:SubtleType):
		if not isinstance(that, ProductType): return None
		first = self.do(this.first, that.first)
		second = self.do(this.second, that.second)
		if first is None or second is None: return None
		return ProductType(first, second)

	def visit_RecordType(self, this:RecordType, that:SubtleType):
		if not isinstance(that, RecordType): return None
		fields = []
		for label, typ in this.fields:
			if that.has(label):
				typ = self.do(typ, that.field(label))
				if typ is None: return None
			fields.append((label, typ))
		fields.extend((label, typ) for label, typ in that.fields if not this.has(label))
		return RecordType(fields)

_SUBSUMPTION = Subsumption()
_LUB = LeastUpperBound()
_GLB = GreatestLowerBound()

def is_subtype(s:SubtleType, t:SubtleType) -> bool:
	""" Decide S <: T. """
	return _SUBSUMPTION.do(s, t)

def is_equivalent(s:SubtleType, t:SubtleType) -> bool:
	"""
	Mutual subtyping. With no bottom type and no recursive types,
	this presently coincides with structural equality, but that
	is a theorem about the relation, not a definition of it.
	"""
	return is_subtype(s, t) and is_subtype(t, s)

def join(s:SubtleType, t:SubtleType) -> SubtleType:
	""" Least upper bound. Always defined; at worst Top. """
	return _LUB.do(s, t)

def meet(s:SubtleType, t:SubtleType) -> Optional[SubtleType]:
	""" Greatest lower bound, or None if the two types have no common subtype. """
	return _GLB.do(s, t)

def require_meet(s:SubtleType, t:SubtleType) -> SubtleType:
	""" Like meet, but a missing meet is a type error. """
	it = meet(s, t)
	if it is None:
		raise NoMeet(None, "%r and %r have no common subtype."%(s, t))
	return it
