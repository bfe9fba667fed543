"""Index-based document store for tree builders.

Nodes live in one central list and refer to each other by integer handle, so
parent and child never own each other directly.
"""


class NodeRecord:
    __slots__ = ("children", "data", "parent")

    def __init__(self, data):
        self.data = data
        self.parent = None
        self.children = []

    def __repr__(self):
        return f"NodeRecord({self.data!r}, parent={self.parent}, children={self.children})"


class Arena:
    __slots__ = ("_nodes",)

    def __init__(self):
        self._nodes = []

    def __len__(self):
        return len(self._nodes)

    def __contains__(self, handle):
        return isinstance(handle, int) and 0 <= handle < len(self._nodes)

    def _record(self, handle):
        if handle not in self:
            raise KeyError(handle)
        return self._nodes[handle]

    def create_node(self, data):
        """Store ``data`` as a new detached node and return its handle."""
        self._nodes.append(NodeRecord(data))
        return len(self._nodes) - 1

    def data(self, handle):
        return self._record(handle).data

    def parent_of(self, handle):
        return self._record(handle).parent

    def children_of(self, handle):
        return tuple(self._record(handle).children)

    def first_child(self, handle):
        children = self._record(handle).children
        return children[0] if children else None

    def next_sibling(self, handle):
        parent = self._record(handle).parent
        if parent is None:
            return None
        siblings = self._nodes[parent].children
        index = siblings.index(handle) + 1
        return siblings[index] if index < len(siblings) else None

    def append_child(self, parent, child):
        """Make ``child`` the last child of ``parent``, detaching it first."""
        parent_record = self._record(parent)
        child_record = self._record(child)
        if self._is_ancestor_or_self(child, parent):
            msg = f"Appending node {child} under node {parent} would create a cycle"
            raise ValueError(msg)
        if child_record.parent is not None:
            self._nodes[child_record.parent].children.remove(child)
        child_record.parent = parent
        parent_record.children.append(child)

    def remove_child(self, parent, child):
        parent_record = self._record(parent)
        child_record = self._record(child)
        if child_record.parent != parent:
            msg = f"Node {child} is not a child of node {parent}"
            raise ValueError(msg)
        parent_record.children.remove(child)
        child_record.parent = None

    def _is_ancestor_or_self(self, candidate, handle):
        current = handle
        while current is not None:
            if current == candidate:
                return True
            current = self._nodes[current].parent
        return False
