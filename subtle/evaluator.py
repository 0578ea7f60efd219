"""
Call-By-Value with Small Steps

Each step contracts exactly one redex, always the leftmost-innermost one
that call-by-value allows. There is no search: the shape of the term
determines the rule. A non-value term that fits no rule is stuck,
which the progress property says cannot happen to a well-typed term.
"""
from typing import Iterator, Optional
from boozetools.support.foundation import Visitor
from . import syntax
from .syntax import Term

DEFAULT_MAX_STEPS = 10_000

class EvalError(Exception):
	pass

class Stuck(EvalError):
	""" Carries the sub-term that no rule applies to. Always a bug when the term was well-typed. """
	def __init__(self, term:Term):
		super().__init__("Stuck at %r"%(term,))
		self.term = term

class NonTermination(EvalError):
	def __init__(self, term:Term, budget:int):
		super().__init__("No normal form within %d steps"%budget)
		self.term = term
		self.budget = budget

_ATOMIC_VALUES = (syntax.Abs, syntax.TrueLit, syntax.FalseLit, syntax.UnitVal, syntax.Constant)

def is_value(term:Term) -> bool:
	if isinstance(term, _ATOMIC_VALUES): return True
	if isinstance(term, syntax.Pair): return is_value(term.first) and is_value(term.second)
	if isinstance(term, syntax.RecordLit): return all(is_value(t) for _, t in term.fields)
	return False

###################
# Names and substitution

class FreeVariables(Visitor):
	def visit_Var(self, term:syntax.Var, found:set):
		found.add(term.name)
	def visit_Abs(self, term:syntax.Abs, found:set):
		inner = set()
		self.visit(term.body, inner)
		inner.discard(term.param)
		found.update(inner)
	def visit_App(self, term:syntax.App, found:set):
		self.visit(term.fn, found)
		self.visit(term.arg, found)
	def visit_Constant(self, term, found): pass
	visit_TrueLit = visit_FalseLit = visit_UnitVal = visit_Constant
	def visit_If(self, term:syntax.If, found:set):
		for t in (term.cond, term.then_part, term.else_part): self.visit(t, found)
	def visit_Pair(self, term:syntax.Pair, found:set):
		self.visit(term.first, found)
		self.visit(term.second, found)
	def visit_Fst(self, term:syntax.Fst, found:set): self.visit(term.pair, found)
	def visit_Snd(self, term:syntax.Snd, found:set): self.visit(term.pair, found)
	def visit_RecordLit(self, term:syntax.RecordLit, found:set):
		for _, t in term.fields: self.visit(t, found)
	def visit_Proj(self, term:syntax.Proj, found:set): self.visit(term.subject, found)
	def visit_Ascribe(self, term:syntax.Ascribe, found:set): self.visit(term.term, found)

def free_variables(term:Term) -> set[str]:
	found = set()
	FreeVariables().visit(term, found)
	return found

def _fresh(name:str, avoid:set) -> str:
	while name in avoid: name += "'"
	return name

class Substitution(Visitor):
	"""
	Capture-avoiding: a binder that would capture a free variable
	of the replacement gets renamed on the way through.
	Closed programs never trigger the renaming, but open terms can.
	"""
	def __init__(self, name:str, replacement:Term):
		self._name = name
		self._replacement = replacement
		self._replacement_fv = free_variables(replacement)

	def visit_Var(self, term:syntax.Var):
		return self._replacement if term.name == self._name else term

	def visit_Abs(self, term:syntax.Abs):
		if term.param == self._name:
			return term  # Shadowed
		param, body = term.param, term.body
		if param in self._replacement_fv:
			avoid = self._replacement_fv | free_variables(body) | {self._name}
			param = _fresh(param, avoid)
			body = substitute(body, term.param, syntax.Var(param))
		return syntax.Abs(param, term.param_type, self.visit(body))

	def visit_App(self, term:syntax.App):
		return syntax.App(self.visit(term.fn), self.visit(term.arg))
	@staticmethod
	def visit_Constant(term): return term
	visit_TrueLit = visit_FalseLit = visit_UnitVal = visit_Constant
	def visit_If(self, term:syntax.If):
		return syntax.If(self.visit(term.cond), self.visit(term.then_part), self.visit(term.else_part))
	def visit_Pair(self, term:syntax.Pair):
		return syntax.Pair(self.visit(term.first), self.visit(term.second))
	def visit_Fst(self, term:syntax.Fst): return syntax.Fst(self.visit(term.pair))
	def visit_Snd(self, term:syntax.Snd): return syntax.Snd(self.visit(term.pair))
	def visit_RecordLit(self, term:syntax.RecordLit):
		return syntax.RecordLit((label, self.visit(t)) for label, t in term.fields)
	def visit_Proj(self, term:syntax.Proj): return syntax.Proj(self.visit(term.subject), term.label)
	def visit_Ascribe(self, term:syntax.Ascribe): return syntax.Ascribe(self.visit(term.term), term.ascription)

def substitute(term:Term, name:str, replacement:Term) -> Term:
	""" term[replacement/name] """
	return Substitution(name, replacement).visit(term)

###################
# The reduction rules, one function per form that can take a step.
# Each is only ever called on a non-value.

def _step_var(term:syntax.Var):
	raise Stuck(term)

def _step_app(term:syntax.App):
	if not is_value(term.fn): return syntax.App(_reduce(term.fn), term.arg)
	if not is_value(term.arg): return syntax.App(term.fn, _reduce(term.arg))
	if isinstance(term.fn, syntax.Abs): return substitute(term.fn.body, term.fn.param, term.arg)
	raise Stuck(term)

def _step_if(term:syntax.If):
	if not is_value(term.cond):
		return syntax.If(_reduce(term.cond), term.then_part, term.else_part)
	if term.cond == syntax.TRUE: return term.then_part
	if term.cond == syntax.FALSE: return term.else_part
	raise Stuck(term)

def _step_pair(term:syntax.Pair):
	if not is_value(term.first): return syntax.Pair(_reduce(term.first), term.second)
	return syntax.Pair(term.first, _reduce(term.second))

def _project(term:Term, pair:Term, which:int):
	if isinstance(pair, syntax.Pair): return (pair.first, pair.second)[which]
	raise Stuck(term)

def _step_fst(term:syntax.Fst):
	if not is_value(term.pair): return syntax.Fst(_reduce(term.pair))
	return _project(term, term.pair, 0)

def _step_snd(term:syntax.Snd):
	if not is_value(term.pair): return syntax.Snd(_reduce(term.pair))
	return _project(term, term.pair, 1)

def _step_record_lit(term:syntax.RecordLit):
	fields = list(term.fields)
	for i, (label, t) in enumerate(fields):
		if not is_value(t):
			fields[i] = label, _reduce(t)
			return syntax.RecordLit(fields)
	assert False, "Records of values are values."

def _step_proj(term:syntax.Proj):
	if not is_value(term.subject): return syntax.Proj(_reduce(term.subject), term.label)
	if isinstance(term.subject, syntax.RecordLit):
		for label, t in term.subject.fields:
			if label == term.label: return t
	raise Stuck(term)

def _step_ascribe(term:syntax.Ascribe):
	if not is_value(term.term): return syntax.Ascribe(_reduce(term.term), term.ascription)
	return term.term

STEP = {}

def _attach_step_methods(python_scope):
	for _k, _v in list(python_scope.items()):
		if _k.startswith("_step_"):
			_t = _v.__annotations__["term"]
			assert isinstance(_t, type), (_k, _t)
			STEP[_t] = _v

_attach_step_methods(globals())

def _reduce(term:Term) -> Term:
	try: fn = STEP[type(term)]
	except KeyError: raise Stuck(term) from None
	return fn(term)

def step(term:Term) -> Optional[Term]:
	""" One reduction, or None if the term is already a value. Raises Stuck otherwise. """
	if is_value(term): return None
	return _reduce(term)

def trace(term:Term, max_steps:int=DEFAULT_MAX_STEPS) -> Iterator[Term]:
	""" Yields the term and every reduct, ending at a value. """
	yield term
	for _ in range(max_steps):
		term = step(term)
		if term is None: return
		yield term
	if not is_value(term):
		raise NonTermination(term, max_steps)

def run(term:Term, max_steps:int=DEFAULT_MAX_STEPS) -> Term:
	""" Normal form, or Stuck, or NonTermination. """
	for _ in range(max_steps):
		nxt = step(term)
		if nxt is None: return term
		term = nxt
	if is_value(term): return term
	raise NonTermination(term, max_steps)
