"""Trie data structure for named character reference prefix matching.

The trie maps reference names (with optional trailing `;`) to their decoded
values, which gives the tokenizer:
  - O(k) prefix matching where k = prefix length
  - Early termination on impossible prefixes
  - Longest prefix lookup for overlapping names (e.g., "not" vs "notin;")
"""


class TrieNode:
    """Single node in the trie tree."""
    __slots__ = ("children", "value", "is_terminal")

    def __init__(self):
        self.children = {}  # char -> TrieNode
        self.value = None
        self.is_terminal = False


class Trie:
    """Trie for reference name lookup and prefix matching.

    Usage:
        trie = Trie({"amp": "&", "amp;": "&", "lt": "<", "lt;": "<"})

        # Find longest matching name starting at offset 1
        trie.longest_prefix_item("&amp;x", 1)
        # Returns ("amp;", "&") not ("amp", "&")
    """

    __slots__ = ("root",)

    def __init__(self, entities):
        """Build trie from name -> decoded value mapping."""
        self.root = TrieNode()
        for name, value in entities.items():
            self._insert(name, value)

    def _insert(self, name, value):
        node = self.root
        children = node.children
        for char in name:
            if char not in children:
                children[char] = TrieNode()
            node = children[char]
            children = node.children
        node.is_terminal = True
        node.value = value

    def longest_prefix_item(self, text, start=0):
        """Find the longest name matching a prefix of ``text[start:]``.

        Scans character by character, tracking the longest terminal node seen.

        Raises:
            KeyError: if no name matches any prefix

        Returns:
            tuple: (name, decoded_value)
        """
        longest_end = start
        longest_value = None
        children = self.root.children
        length = len(text)
        pos = start

        while pos < length:
            char = text[pos]
            if char not in children:
                break
            node = children[char]
            pos += 1
            if node.is_terminal:
                longest_end = pos
                longest_value = node.value
            children = node.children

        if longest_end == start:
            raise KeyError(f"No entity prefix match in {text[start:start + 32]!r}")

        return text[start:longest_end], longest_value

    def _find(self, name):
        node = self.root
        for char in name:
            node = node.children.get(char)
            if node is None:
                return None
        return node if node.is_terminal else None

    def __contains__(self, name):
        return self._find(name) is not None

    def __getitem__(self, name):
        node = self._find(name)
        if node is None:
            raise KeyError(name)
        return node.value
