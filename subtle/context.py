"""
Typing contexts as persistent linked frames.

Each frame holds one binding and a link to the frame it extends.
Extension never disturbs the parent, so a context may be shared
freely between calls, sub-terms, and threads.
"""
from typing import Iterator, Optional
from .calculus import SubtleType

class Context:
	_name: Optional[str]
	_type: Optional[SubtleType]
	static_link: Optional["Context"]

	def __init__(self, name=None, typ=None, static_link=None):
		self._name, self._type, self.static_link = name, typ, static_link

	def extend(self, name:str, typ:SubtleType) -> "Context":
		""" A fresh context whose binding for `name` shadows any prior one. """
		assert isinstance(typ, SubtleType), typ
		return Context(name, typ, self)

	def lookup(self, name:str) -> SubtleType:
		frame = self
		while frame.static_link is not None:
			if frame._name == name: return frame._type
			frame = frame.static_link
		raise KeyError(name)

	def __contains__(self, name:str) -> bool:
		try: self.lookup(name)
		except KeyError: return False
		else: return True

	def items(self) -> Iterator[tuple[str, SubtleType]]:
		""" Visible bindings, innermost first; shadowed ones are skipped. """
		seen = set()
		frame = self
		while frame.static_link is not None:
			if frame._name not in seen:
				seen.add(frame._name)
				yield frame._name, frame._type
			frame = frame.static_link

	def __len__(self): return sum(1 for _ in self.items())
	def __repr__(self): return "[%s]"%(", ".join("%s:%r"%pair for pair in reversed(list(self.items()))))

EMPTY = Context()
