"""Scope frames for minilisp, kept in an arena and addressed by index.

Every frame maps symbol names to Exprs and knows the index of its parent frame. The evaluator passes the index of
the active frame down explicitly, so no frame is ever aliased: a frame is only reachable through its index.

Frames created for function calls are released when the call returns, unless a lambda defined inside the call
captured the frame (see pin). Captured frames are freed by collect once no binding or value still refers to them.
Released slots are reused by later calls.
"""

from dataclasses import dataclass, field
from typing import Optional

from minilisp.core.expr import Lambda, List, Pair


@dataclass
class Frame:
    parent: Optional[int]
    bindings: dict = field(default_factory=dict)
    pinned: bool = False


class Environment:
    """Arena of Frames. Index ROOT is the global frame, created with the arena and never released."""
    ROOT = 0

    def __init__(self):
        self.frames = [Frame(None)]
        self._free = []

    @classmethod
    def create_root(cls):
        """Returns a new arena holding just the (empty) root frame."""
        return cls()

    def frame(self, scope):
        """Returns the live Frame at scope, raises a KeyError if there is none."""
        if 0 <= scope < len(self.frames) and self.frames[scope] is not None:
            return self.frames[scope]
        raise KeyError(f"no live frame at index {scope}")

    def extend(self, parent):
        """Allocates an empty frame chained to parent and returns its index."""
        self.frame(parent)
        new_frame = Frame(parent)

        if self._free:
            scope = self._free.pop()
            self.frames[scope] = new_frame
        else:
            scope = len(self.frames)
            self.frames.append(new_frame)
        return scope

    def define(self, scope, name, value):
        """Binds name to value in the frame at scope only; bindings of the same name in outer frames are shadowed,
        never modified.
        """
        self.frame(scope).bindings[name] = value

    def lookup(self, scope, name):
        """Returns the value name is bound to in the innermost frame that binds it, starting at scope and walking out
        to the root. Returns None if no frame binds name.
        """
        while scope is not None:
            current = self.frame(scope)
            if name in current.bindings:
                return current.bindings[name]
            scope = current.parent
        return None

    def pin(self, scope):
        """Marks the frame at scope and all of its ancestors as captured, so release leaves them alone."""
        while scope is not None:
            current = self.frame(scope)
            if current.pinned:
                break  # ancestors of a pinned frame are already pinned
            current.pinned = True
            scope = current.parent

    def release(self, scope):
        """Frees the frame at scope for reuse unless it is the root or captured. Returns whether it was freed."""
        if scope == Environment.ROOT or self.frame(scope).pinned:
            return False

        self.frames[scope] = None
        self._free.append(scope)
        return True

    def collect(self, scopes=(ROOT,), values=()):
        """Frees every frame, pinned or not, that cannot be reached from the frames at scopes or from values. A frame
        is reachable when it is one of scopes, the parent of a reachable frame, or the scope of a lambda held by a
        reachable frame's bindings or by values. The root frame is always kept. Returns the number of frames freed.
        """
        reachable = set()
        pending_scopes = [Environment.ROOT, *scopes]
        pending_values = list(values)

        while pending_scopes or pending_values:
            if pending_values:
                value = pending_values.pop()
                if isinstance(value, Lambda) and value.scope is not None:
                    pending_scopes.append(value.scope)
                elif isinstance(value, Pair):
                    pending_values.extend((value.left, value.right))
                elif isinstance(value, List):
                    pending_values.extend(value.elements)
                continue

            scope = pending_scopes.pop()
            if scope is None or scope in reachable or scope not in self:
                continue
            reachable.add(scope)

            current = self.frames[scope]
            pending_scopes.append(current.parent)
            pending_values.extend(current.bindings.values())

        freed = 0
        for scope, current in enumerate(self.frames):
            if current is not None and scope not in reachable:
                self.frames[scope] = None
                self._free.append(scope)
                freed += 1
        return freed

    def __contains__(self, scope):
        return 0 <= scope < len(self.frames) and self.frames[scope] is not None

    def __len__(self):
        return sum(frame is not None for frame in self.frames)

    def __repr__(self):
        return f"Environment(frames={len(self)}, root={sorted(self.frames[Environment.ROOT].bindings)})"
