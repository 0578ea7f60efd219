import sys, random
from typing import Any, Optional, Sequence

from .syntax import Term

class TooManyIssues(Exception):
	pass

###################
# The taxonomy of type errors.
# Each one is terminal for the check that raised it,
# and carries the sub-term that was found guilty.

class TypeCheckError(Exception):
	""" Base of all the ways a term can fail to have a type. """
	def __init__(self, term:Optional[Term], message:str):
		super().__init__(message)
		self.term = term
		self.message = message
	@property
	def kind(self) -> str: return type(self).__name__
	def __str__(self):
		if self.term is None: return "%s: %s"%(self.kind, self.message)
		return "%s: %s\n    in %r"%(self.kind, self.message, self.term)

class UnboundVariable(TypeCheckError): pass
class NotAFunction(TypeCheckError): pass
class ArgumentTypeMismatch(TypeCheckError): pass
class ConditionNotBool(TypeCheckError): pass
class NotAPair(TypeCheckError): pass
class NoMeet(TypeCheckError): pass
class NotARecord(TypeCheckError): pass
class MissingField(TypeCheckError): pass
class DuplicateLabel(TypeCheckError): pass
class AscriptionMismatch(TypeCheckError): pass

###################

def _outburst():
	particle = ["Oh, ", "Well, ", "Aw, ", "", ""]

	minced_oaths = [
		'Ack', 'ARGH', 'Blargh', 'Confound it', 'Crud', 'Curses', "Crikey",
		'Drat', 'Fiddlesticks', 'Good Grief', "Great Scott",
		'Jeepers', 'Heavens', "Mercy", 'Nuts', 'Rats',
	]

	resignations = [
		'The type system has a hole in it.',
		'Something is unsound.',
		'I have no idea what the right answer is.',
		'I need to ask for help.',
	]

	return "%s%s! %s"%tuple(map(random.choice, (particle, minced_oaths, resignations)))

class Pic:
	""" One issue: an introduction, the exhibits (terms or types), and maybe a footer. """
	def __init__(self, intro:str, exhibits:Sequence[tuple[str, Any]], footer=()):
		self.intro, self._exhibits, self._footer = intro, list(exhibits), footer
	def as_text(self):
		lines = [self.intro, ""]
		for caption, thing in self._exhibits:
			lines.append("    %s: %r"%(caption, thing))
		lines.extend(self._footer)
		return '\n'.join(lines)

class Report:
	""" Collects issues from a run, and says something about progress when asked to. """
	issues : list[Pic]

	def __init__(self, *, verbose:int=0, max_issues=10):
		self._verbose = verbose or 0   # Because None is incomparable.
		self.issues = []
		self._max_issues = max_issues

	def ok(self): return not self.issues
	def sick(self): return bool(self.issues)

	def issue(self, it:Pic):
		self.issues.append(it)
		if len(self.issues) == self._max_issues:
			raise TooManyIssues(self)

	def info(self, *args):
		if self._verbose:
			print(*args, file=sys.stderr)

	def debug(self, *args):
		if self._verbose > 1:
			print(*args, file=sys.stderr)

	def complain_to_console(self):
		""" Emit all the issues to the console. """
		_bemoan(self.issues)

	# Methods the soundness harness calls:

	def counterexample(self, law:str, *exhibits:tuple[str, Any]):
		self.issue(Pic("Counterexample to %s."%law, exhibits))

	def ill_typed_specimen(self, term:Term, error:TypeCheckError):
		intro = "The term generator produced something the type-checker rejects."
		footer = ["That's a bug in the generator, or else in the checker."]
		self.issue(Pic(intro, [("term", term), ("verdict", error.kind), ("because", error.message)], footer))

	def stuck(self, term:Term, typ, redex:Term):
		intro = "A well-typed term got stuck, which the progress property forbids."
		self.issue(Pic(intro, [("term", term), ("type", typ), ("stuck at", redex)]))

	def type_changed(self, before:Term, typ, after:Term, new_type):
		intro = "A step produced a term of a type that is no subtype of the original."
		exhibits = [("before", before), ("type", typ), ("after", after), ("now", new_type)]
		self.issue(Pic(intro, exhibits))

	def lost_type(self, before:Term, typ, after:Term, error:TypeCheckError):
		intro = "A step produced an ill-typed term, which the preservation property forbids."
		exhibits = [("before", before), ("type", typ), ("after", after), ("verdict", str(error))]
		self.issue(Pic(intro, exhibits))

	def did_not_terminate(self, term:Term, budget:int):
		intro = "Evaluation ran out of its budget of %d steps."%budget
		footer = ["Every well-typed term in this language should normalize."]
		self.issue(Pic(intro, [("term", term)], footer))

def _bemoan(issues):
	""" Emit all the issues to the console. """
	if issues:
		print("*"*60, file=sys.stderr)
		print(_outburst(), file=sys.stderr)
	for i in issues:
		print("  -"*20, file=sys.stderr)
		print(i.as_text(), file=sys.stderr)
	sys.stderr.flush()
