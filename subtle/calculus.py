"""
The types of the language, as value objects.

Every type is structurally constructed and immutable.
Type-numbering is an equivalence classification scheme:
two types are the same type exactly when they get the same number,
so equality and hashing go fast no matter how deep the type.
I can reuse the classifier from booze-tools.

Records are keyed on their fields in label order,
which makes the written order of fields immaterial to equality.
The written order is still kept around for rendering.
"""
from typing import Iterable
from boozetools.support.foundation import EquivalenceClassifier

_type_numbering_subsystem = EquivalenceClassifier()

class SubtleType:
	"""Value objects so they can play well with the classifier"""
	def visit(self, visitor:"TypeVisitor"): raise NotImplementedError(type(self))

	def __init__(self, *key):
		self._key = key
		self._hash = hash(key)
		self.number = _type_numbering_subsystem.classify(self)
	def __hash__(self): return self._hash
	def __eq__(self, other: "SubtleType"): return type(self) is type(other) and self._key == other._key
	def __ne__(self, other): return not self == other
	def __repr__(self) -> str:
		it = self.visit(Render())
		assert isinstance(it, str), (it, type(self))
		return it

class _Top(SubtleType):
	""" The universal supertype. Everything is one of these. """
	def visit(self, visitor:"TypeVisitor"): return visitor.on_top()

class _Bool(SubtleType):
	def visit(self, visitor:"TypeVisitor"): return visitor.on_bool()

class _Unit(SubtleType):
	def visit(self, visitor:"TypeVisitor"): return visitor.on_unit()

class BaseType(SubtleType):
	""" Opaque and named. Equal only to itself; related to nothing but Top. """
	def __init__(self, name:str):
		assert isinstance(name, str) and name, name
		self.name = name
		super().__init__(name)
	def visit(self, visitor:"TypeVisitor"): return visitor.on_base(self)

class ArrowType(SubtleType):
	def __init__(self, domain: SubtleType, codomain: SubtleType):
		assert isinstance(domain, SubtleType), domain
		assert isinstance(codomain, SubtleType), codomain
		self.domain, self.codomain = domain, codomain
		super().__init__(domain.number, codomain.number)
	def visit(self, visitor:"TypeVisitor"): return visitor.on_arrow(self)

class ProductType(SubtleType):
	def __init__(self, first: SubtleType, second: SubtleType):
		assert isinstance(first, SubtleType), first
		assert isinstance(second, SubtleType), second
		self.first, self.second = first, second
		super().__init__(first.number, second.number)
	def visit(self, visitor:"TypeVisitor"): return visitor.on_product(self)

class RecordType(SubtleType):
	"""
	Purely structural labeled-field composites.
	Labels must be unique within a record; the order they are written in
	survives only for the sake of display.
	"""
	fields: tuple[tuple[str, SubtleType], ...]

	def __init__(self, fields: Iterable[tuple[str, SubtleType]]):
		self.fields = tuple(fields)
		self._index = dict(self.fields)
		assert len(self._index) == len(self.fields), "Duplicate label in %r" % (self.labels(),)
		assert all(isinstance(t, SubtleType) for t in self._index.values())
		super().__init__(*sorted((label, t.number) for label, t in self.fields))
	def visit(self, visitor:"TypeVisitor"): return visitor.on_record(self)
	def labels(self) -> tuple[str, ...]: return tuple(label for label, _ in self.fields)
	def has(self, label:str) -> bool: return label in self._index
	def field(self, label:str) -> SubtleType:
		""" Raises KeyError for a missing label. """
		return self._index[label]

TOP = _Top(None)
BOOL = _Bool(None)
UNIT = _Unit(None)

def record(*fields) -> RecordType:
	""" Convenience: record(("name", STRING), ("age", NAT)) """
	return RecordType(fields)

def arrows(*types: SubtleType) -> SubtleType:
	""" Right-associated arrow chain: arrows(A, B, C) is A->(B->C) """
	assert types
	*init, result = types
	for t in reversed(init):
		result = ArrowType(t, result)
	return result

###################
#

class TypeVisitor:
	def on_top(self): raise NotImplementedError(type(self))
	def on_bool(self): raise NotImplementedError(type(self))
	def on_unit(self): raise NotImplementedError(type(self))
	def on_base(self, b:BaseType): raise NotImplementedError(type(self))
	def on_arrow(self, a:ArrowType): raise NotImplementedError(type(self))
	def on_product(self, p:ProductType): raise NotImplementedError(type(self))
	def on_record(self, r:RecordType): raise NotImplementedError(type(self))


class Render(TypeVisitor):
	""" Return a string representation of the type. """
	def on_top(self): return "Top"
	def on_bool(self): return "Bool"
	def on_unit(self): return "Unit"
	def on_base(self, b: BaseType): return b.name
	def on_arrow(self, a: ArrowType):
		lhs = a.domain.visit(self)
		if isinstance(a.domain, (ArrowType, ProductType)):
			lhs = "(%s)" % lhs
		return lhs+"->"+a.codomain.visit(self)
	def on_product(self, p: ProductType):
		return "%s*%s" % (self._operand(p.first), self._operand(p.second))
	def _operand(self, t:SubtleType):
		text = t.visit(self)
		return "(%s)"%text if isinstance(t, (ArrowType, ProductType)) else text
	def on_record(self, r: RecordType):
		return "{%s}"%(", ".join("%s:%s"%(label, t.visit(self)) for label, t in r.fields))


class Depth(TypeVisitor):
	""" Structural depth, which bounds the recursion of every algorithm over types. """
	def on_top(self): return 1
	def on_bool(self): return 1
	def on_unit(self): return 1
	def on_base(self, b: BaseType): return 1
	def on_arrow(self, a: ArrowType): return 1 + max(a.domain.visit(self), a.codomain.visit(self))
	def on_product(self, p: ProductType): return 1 + max(p.first.visit(self), p.second.visit(self))
	def on_record(self, r: RecordType): return 1 + max((t.visit(self) for _, t in r.fields), default=0)

def depth(t:SubtleType) -> int:
	return t.visit(Depth())
