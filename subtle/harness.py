"""
Soundness, checked rather than proved.

The two classical theorems, and the algebraic laws the subtype engine
is supposed to obey, are phrased here as properties over randomly
generated specimens. Generation is seeded, so any counterexample
can be reproduced by running again with the same configuration.

Random triples of types are almost never related, which would make
transitivity vacuously true. So the type generator can also build a
subtype or a supertype of a given type, and the transitivity check
builds its triples around a common middle.

Terms are generated to inhabit a requested type, with plenty of
eliminations thrown in so that evaluation has real work to do.
The checker gets the final say on every specimen: a generated term
it rejects is reported as a defect in its own right.

With subtyping, a step can make a term's type *narrower*:
a conditional typed at a join steps to one of its branches,
and substituting a narrower argument narrows the body.
So preservation here means the new type is a subtype of the old.
Steps that keep the exact type are counted separately.
"""
import random
from collections import Counter
from typing import NamedTuple, Optional

from . import syntax
from .syntax import Term
from .calculus import SubtleType, TOP, BOOL, UNIT, BaseType, ArrowType, ProductType, RecordType, record
from .context import Context, EMPTY
from .subtyping import is_subtype, join, meet
from .type_checker import type_of_closed
from .evaluator import step, run, is_value, Stuck, DEFAULT_MAX_STEPS
from .diagnostics import Report, TypeCheckError

STRING = BaseType("String")
NAT = BaseType("Nat")
BASE_TYPES = (STRING, NAT)
LABELS = ("name", "age", "gpa", "id", "ok")
_SAMPLE_TEXT = {"String": ("Ada", "Grace", "Barbara"), "Nat": ("0", "7", "36")}

class HarnessConfig(NamedTuple):
	trials: int = 200
	seed: int = 0
	depth: int = 3
	max_steps: int = DEFAULT_MAX_STEPS

class TypeGenerator:
	def __init__(self, rng:random.Random, depth:int):
		self._rng = rng
		self.depth = depth

	def leaf(self) -> SubtleType:
		return self._rng.choice((TOP, BOOL, UNIT) + BASE_TYPES)

	def ground(self) -> SubtleType:
		""" A leaf with canonical values of its own, which Top lacks. """
		return self._rng.choice((BOOL, UNIT) + BASE_TYPES)

	def any_type(self, depth:Optional[int]=None) -> SubtleType:
		if depth is None: depth = self.depth
		rng = self._rng
		if depth <= 0: return self.leaf()
		kind = rng.choice(("leaf", "leaf", "arrow", "product", "record"))
		if kind == "arrow": return ArrowType(self.any_type(depth-1), self.any_type(depth-1))
		if kind == "product": return ProductType(self.any_type(depth-1), self.any_type(depth-1))
		if kind == "record":
			labels = rng.sample(LABELS, rng.randint(0, 3))
			return RecordType((label, self.any_type(depth-1)) for label in labels)
		return self.leaf()

	def subtype_of(self, t:SubtleType) -> SubtleType:
		rng = self._rng
		if t is TOP: return self.any_type(self.depth - 1)
		if isinstance(t, ArrowType): return ArrowType(self.supertype_of(t.domain), self.subtype_of(t.codomain))
		if isinstance(t, ProductType): return ProductType(self.subtype_of(t.first), self.subtype_of(t.second))
		if isinstance(t, RecordType):
			fields = [(label, self.subtype_of(typ)) for label, typ in t.fields]
			spare = [label for label in LABELS if not t.has(label)]
			for label in rng.sample(spare, rng.randint(0, min(2, len(spare)))):
				fields.append((label, self.any_type(1)))
			rng.shuffle(fields)
			return RecordType(fields)
		return t

	def supertype_of(self, t:SubtleType) -> SubtleType:
		rng = self._rng
		if rng.random() < 0.15: return TOP
		if isinstance(t, ArrowType): return ArrowType(self.subtype_of(t.domain), self.supertype_of(t.codomain))
		if isinstance(t, ProductType): return ProductType(self.supertype_of(t.first), self.supertype_of(t.second))
		if isinstance(t, RecordType):
			kept = [(label, self.supertype_of(typ)) for label, typ in t.fields if rng.random() < 0.7]
			rng.shuffle(kept)
			return RecordType(kept)
		return t

class TermGenerator:
	"""
	Builds terms whose synthesized type is a subtype of the one requested.
	At depth zero, only introduction forms and variables are used,
	which keeps generation finite: those recurse on the type alone.
	"""
	def __init__(self, rng:random.Random, depth:int, types:TypeGenerator):
		self._rng = rng
		self.depth = depth
		self._types = types
		self._counter = 0

	def _fresh(self) -> str:
		self._counter += 1
		return "x%d"%self._counter

	def closed(self, t:SubtleType) -> Term:
		return self.inhabit(t, EMPTY, self.depth)

	def inhabit(self, t:SubtleType, ctx:Context, depth:int) -> Term:
		rng = self._rng
		candidates = [name for name, typ in ctx.items() if is_subtype(typ, t)]
		if candidates and rng.random() < 0.3:
			return syntax.Var(rng.choice(candidates))
		if depth <= 0: return self._introduce(t, ctx, depth)
		how = rng.choice(("intro", "intro", "beta", "if", "fst", "snd", "proj", "ascribe"))
		return getattr(self, "_"+how)(t, ctx, depth)

	def _introduce(self, t:SubtleType, ctx:Context, depth:int) -> Term:
		rng = self._rng
		if t is TOP:
			return self.inhabit(self._types.ground() if depth <= 0 else self._types.any_type(depth-1), ctx, depth-1)
		if t is BOOL: return rng.choice((syntax.TRUE, syntax.FALSE))
		if t is UNIT: return syntax.UNIT_VAL
		if isinstance(t, BaseType): return syntax.Constant(rng.choice(_SAMPLE_TEXT.get(t.name, ("?",))), t)
		if isinstance(t, ArrowType):
			x = self._fresh()
			return syntax.Abs(x, t.domain, self.inhabit(t.codomain, ctx.extend(x, t.domain), depth-1))
		if isinstance(t, ProductType):
			return syntax.Pair(self.inhabit(t.first, ctx, depth-1), self.inhabit(t.second, ctx, depth-1))
		if isinstance(t, RecordType):
			fields = [(label, self.inhabit(typ, ctx, depth-1)) for label, typ in t.fields]
			spare = [label for label in LABELS if not t.has(label)]
			if spare and rng.random() < 0.3:
				fields.append((rng.choice(spare), self._introduce(self._types.ground(), ctx, 0)))
			rng.shuffle(fields)
			return syntax.RecordLit(fields)
		assert False, t

	_intro = _introduce

	def _beta(self, t:SubtleType, ctx:Context, depth:int) -> Term:
		x = self._fresh()
		s = self._types.any_type(max(depth-1, 0))
		body = self.inhabit(t, ctx.extend(x, s), depth-1)
		return syntax.App(syntax.Abs(x, s, body), self.inhabit(self._types.subtype_of(s), ctx, depth-1))

	def _if(self, t:SubtleType, ctx:Context, depth:int) -> Term:
		return syntax.If(self.inhabit(BOOL, ctx, depth-1), self.inhabit(t, ctx, depth-1), self.inhabit(t, ctx, depth-1))

	def _fst(self, t:SubtleType, ctx:Context, depth:int) -> Term:
		junk = self.inhabit(self._types.ground(), ctx, 0)
		return syntax.Fst(syntax.Pair(self.inhabit(t, ctx, depth-1), junk))

	def _snd(self, t:SubtleType, ctx:Context, depth:int) -> Term:
		junk = self.inhabit(self._types.ground(), ctx, 0)
		return syntax.Snd(syntax.Pair(junk, self.inhabit(t, ctx, depth-1)))

	def _proj(self, t:SubtleType, ctx:Context, depth:int) -> Term:
		rng = self._rng
		label, *others = rng.sample(LABELS, rng.randint(1, 3))
		fields = [(label, self.inhabit(t, ctx, depth-1))]
		fields.extend((other, self.inhabit(self._types.ground(), ctx, 0)) for other in others)
		rng.shuffle(fields)
		return syntax.Proj(syntax.RecordLit(fields), label)

	def _ascribe(self, t:SubtleType, ctx:Context, depth:int) -> Term:
		return syntax.Ascribe(self.inhabit(t, ctx, depth-1), t)

###################
# Stand-alone statements of the two theorems, for one closed term at a time.

def progress_holds(term:Term) -> bool:
	""" A closed, well-typed term is a value or else can step. """
	type_of_closed(term)
	if is_value(term): return True
	try: step(term)
	except Stuck: return False
	else: return True

def preservation_holds(term:Term) -> bool:
	""" One step from a closed, well-typed term lands on a term at some subtype. """
	before = type_of_closed(term)
	after = step(term)
	if after is None: return True
	try: return is_subtype(type_of_closed(after), before)
	except TypeCheckError: return False

###################

class Harness:
	""" Drives every law for a configured number of trials and reports each counterexample. """

	def __init__(self, config:HarnessConfig, report:Report):
		self.config = config
		self._report = report
		rng = random.Random(config.seed)
		self.types = TypeGenerator(rng, config.depth)
		self.terms = TermGenerator(rng, config.depth, self.types)
		self.stats = Counter()

	def run(self) -> Counter:
		report = self._report
		for law in (self.reflexivity, self.top_maximality, self.transitivity, self.join_laws, self.meet_laws, self.soundness):
			report.info("Checking", law.__name__.replace("_", " "))
			for _ in range(self.config.trials):
				law()
		report.info("Tallies:", ", ".join("%s=%d"%pair for pair in sorted(self.stats.items())))
		return self.stats

	def reflexivity(self):
		t = self.types.any_type()
		if not is_subtype(t, t):
			self._report.counterexample("reflexivity", ("T", t))

	def top_maximality(self):
		t = self.types.any_type()
		if not is_subtype(t, TOP) or is_subtype(TOP, t) != (t == TOP):
			self._report.counterexample("maximality of Top", ("T", t))

	def transitivity(self):
		u = self.types.any_type()
		s, t = self.types.subtype_of(u), self.types.supertype_of(u)
		if not (is_subtype(s, u) and is_subtype(u, t)):
			self._report.counterexample("the type generator's promises", ("S", s), ("U", u), ("T", t))
		elif not is_subtype(s, t):
			self._report.counterexample("transitivity", ("S", s), ("U", u), ("T", t))
		else:
			self.stats["transitive triples"] += 1

	def join_laws(self):
		u = self.types.any_type()
		s, t = self.types.subtype_of(u), self.types.subtype_of(u)
		j = join(s, t)
		if not (is_subtype(s, j) and is_subtype(t, j)):
			self._report.counterexample("join being an upper bound", ("S", s), ("T", t), ("join", j))
		elif not is_subtype(j, u):
			self._report.counterexample("join being least", ("S", s), ("T", t), ("join", j), ("bound", u))

	def meet_laws(self):
		u = self.types.any_type()
		s, t = self.types.supertype_of(u), self.types.supertype_of(u)
		m = meet(s, t)
		if m is None:
			self._report.counterexample("meet existing over a common subtype", ("S", s), ("T", t), ("bound", u))
		elif not (is_subtype(m, s) and is_subtype(m, t)):
			self._report.counterexample("meet being a lower bound", ("S", s), ("T", t), ("meet", m))
		elif not is_subtype(u, m):
			self._report.counterexample("meet being greatest", ("S", s), ("T", t), ("meet", m), ("bound", u))
		# Unrelated pairs still owe the lower-bound law whenever they do meet.
		s, t = self.types.any_type(), self.types.any_type()
		m = meet(s, t)
		if m is None:
			self.stats["pairs without meet"] += 1
		elif not (is_subtype(m, s) and is_subtype(m, t)):
			self._report.counterexample("meet being a lower bound", ("S", s), ("T", t), ("meet", m))

	def soundness(self):
		""" Progress and preservation along the whole evaluation of one specimen. """
		report = self._report
		target = self.types.any_type()
		term = self.terms.closed(target)
		try: typ = type_of_closed(term)
		except TypeCheckError as ex:
			report.ill_typed_specimen(term, ex)
			return
		if not is_subtype(typ, target):
			report.counterexample("the term generator's promises", ("term", term), ("type", typ), ("wanted", target))
			return
		report.debug("  ", term, ":", typ)
		for _ in range(self.config.max_steps):
			if is_value(term):
				self.stats["values reached"] += 1
				return
			try: after = step(term)
			except Stuck as ex:
				report.stuck(term, typ, ex.term)
				return
			if after != step(term):
				report.counterexample("determinism of step", ("term", term))
				return
			try: new_type = type_of_closed(after)
			except TypeCheckError as ex:
				report.lost_type(term, typ, after, ex)
				return
			if not is_subtype(new_type, typ):
				report.type_changed(term, typ, after, new_type)
				return
			self.stats["exact steps" if new_type == typ else "narrowing steps"] += 1
			term, typ = after, new_type
		report.did_not_terminate(term, self.config.max_steps)

###################
# The fixed scenarios worth showing off.

PERSON = record(("name", STRING), ("age", NAT))
STUDENT = record(("name", STRING), ("age", NAT), ("gpa", NAT))

def _student():
	return syntax.record_lit(
		name=syntax.Constant("Ada", STRING),
		age=syntax.Constant("36", NAT),
		gpa=syntax.Constant("4", NAT),
	)

def scenarios() -> list[tuple[str, Term]]:
	r = syntax.Var("r")
	x = syntax.Var("x")
	return [
		(
			"A wider record passes for a narrower one",
			syntax.App(
				syntax.Abs("r", PERSON, syntax.Pair(syntax.Proj(r, "name"), syntax.Proj(r, "age"))),
				_student(),
			),
		),
		(
			"Branches with unrelated domains join at Top",
			syntax.If(syntax.TRUE, syntax.Abs("x", BOOL, x), syntax.Abs("x", UNIT, x)),
		),
		(
			"Projection out of a pair",
			syntax.Fst(syntax.Pair(syntax.TRUE, syntax.UNIT_VAL)),
		),
		(
			"Branches with related records join at their common fields",
			syntax.If(syntax.FALSE, _student(), syntax.Ascribe(_student(), PERSON)),
		),
	]

def show_scenarios(report:Report, max_steps:int=DEFAULT_MAX_STEPS) -> list[tuple[str, SubtleType, Term]]:
	results = []
	for caption, term in scenarios():
		typ = type_of_closed(term)
		value = run(term, max_steps)
		report.info(caption)
		report.info("   ", term, ":", typ)
		report.info("    ==>", value)
		results.append((caption, typ, value))
	return results
