"""
The set of term-nodes in simple form.

There is no parser: an external driver builds these directly.
Terms are immutable once built, and compare structurally.
The checker and the evaluator both dispatch on the concrete class,
so adding a form means visiting both.
"""
from typing import Iterable
from .calculus import SubtleType, BaseType

class Term:
	""" Structural equality follows from the key each form supplies. """
	def _key(self) -> tuple: raise NotImplementedError(type(self))
	def __eq__(self, other): return type(self) is type(other) and self._key() == other._key()
	def __ne__(self, other): return not self == other
	def __hash__(self): return hash((type(self), self._key()))

class Var(Term):
	def __init__(self, name:str):
		assert isinstance(name, str) and name, name
		self.name = name
	def _key(self): return (self.name,)
	def __repr__(self): return self.name

class Abs(Term):
	def __init__(self, param:str, param_type:SubtleType, body:Term):
		assert isinstance(param, str) and param, param
		assert isinstance(param_type, SubtleType), param_type
		assert isinstance(body, Term), body
		self.param, self.param_type, self.body = param, param_type, body
	def _key(self): return self.param, self.param_type, self.body
	def __repr__(self): return "(\\%s:%r. %r)"%(self.param, self.param_type, self.body)

class App(Term):
	def __init__(self, fn:Term, arg:Term):
		assert isinstance(fn, Term), fn
		assert isinstance(arg, Term), arg
		self.fn, self.arg = fn, arg
	def _key(self): return self.fn, self.arg
	def __repr__(self): return "(%r %r)"%(self.fn, self.arg)

class _Literal(Term):
	""" The nullary forms. There is exactly one of each. """
	def __init__(self, text:str): self._text = text
	def _key(self): return ()
	def __repr__(self): return self._text

class TrueLit(_Literal): pass
class FalseLit(_Literal): pass
class UnitVal(_Literal): pass

TRUE = TrueLit("true")
FALSE = FalseLit("false")
UNIT_VAL = UnitVal("unit")

class Constant(Term):
	""" An opaque literal of some base type, such as "Ada" of type String. """
	def __init__(self, text:str, base:BaseType):
		assert isinstance(base, BaseType), base
		self.text, self.base = text, base
	def _key(self): return self.text, self.base
	def __repr__(self): return "%r:%s"%(self.text, self.base.name)

class If(Term):
	def __init__(self, cond:Term, then_part:Term, else_part:Term):
		assert all(isinstance(t, Term) for t in (cond, then_part, else_part))
		self.cond, self.then_part, self.else_part = cond, then_part, else_part
	def _key(self): return self.cond, self.then_part, self.else_part
	def __repr__(self): return "(if %r then %r else %r)"%(self.cond, self.then_part, self.else_part)

class Pair(Term):
	def __init__(self, first:Term, second:Term):
		assert isinstance(first, Term), first
		assert isinstance(second, Term), second
		self.first, self.second = first, second
	def _key(self): return self.first, self.second
	def __repr__(self): return "<%r, %r>"%(self.first, self.second)

class Fst(Term):
	def __init__(self, pair:Term):
		assert isinstance(pair, Term), pair
		self.pair = pair
	def _key(self): return (self.pair,)
	def __repr__(self): return "%r.1"%(self.pair,)

class Snd(Term):
	def __init__(self, pair:Term):
		assert isinstance(pair, Term), pair
		self.pair = pair
	def _key(self): return (self.pair,)
	def __repr__(self): return "%r.2"%(self.pair,)

class RecordLit(Term):
	"""
	Labels ought to be unique, but the type-checker is the one to complain,
	so a driver can build a bogus record and get a sensible diagnostic.
	"""
	fields: tuple[tuple[str, Term], ...]
	def __init__(self, fields:Iterable[tuple[str, Term]]):
		self.fields = tuple(fields)
		assert all(isinstance(t, Term) for _, t in self.fields)
	def _key(self): return self.fields
	def __repr__(self): return "{%s}"%(", ".join("%s=%r"%(label, t) for label, t in self.fields))
	def labels(self): return [label for label, _ in self.fields]

class Proj(Term):
	def __init__(self, subject:Term, label:str):
		assert isinstance(subject, Term), subject
		self.subject, self.label = subject, label
	def _key(self): return self.subject, self.label
	def __repr__(self): return "%r.%s"%(self.subject, self.label)

class Ascribe(Term):
	""" t as T: the one place a program asks for a supertype on purpose. """
	def __init__(self, term:Term, ascription:SubtleType):
		assert isinstance(term, Term), term
		assert isinstance(ascription, SubtleType), ascription
		self.term, self.ascription = term, ascription
	def _key(self): return self.term, self.ascription
	def __repr__(self): return "(%r as %r)"%(self.term, self.ascription)

def record_lit(**fields:Term) -> RecordLit:
	""" Keyword arguments keep their written order, which is handy in tests. """
	return RecordLit(fields.items())
