"""Prefix trie over named character references.

Named references are matched greedily: the tokenizer consumes the longest
name in the table that prefixes the input (``&notin;`` vs ``&not``). The
encoder asks the same question in reverse, to learn whether a bare
``&amp`` would be read back as something longer.
"""


class TrieNode:
    __slots__ = ("children", "is_terminal", "value")

    def __init__(self):
        self.children = {}  # char -> TrieNode
        self.value = None
        self.is_terminal = False


class Trie:
    """Maps reference names (with or without ``;``) to decoded text.

    Usage:
        trie = Trie({"amp": "&", "amp;": "&", "not": "\\u00ac", "notin;": "\\u2209"})
        trie.longest_prefix_item("notin;x")  # ("notin;", "\\u2209")
        trie.longest_prefix_item("notit")    # ("not", "\\u00ac")
    """

    __slots__ = ("max_length", "root")

    def __init__(self, entities):
        self.root = TrieNode()
        self.max_length = 0
        for name, value in entities.items():
            self._insert(name, value)

    def _insert(self, name, value):
        node = self.root
        for char in name:
            children = node.children
            child = children.get(char)
            if child is None:
                child = children[char] = TrieNode()
            node = child
        node.is_terminal = True
        node.value = value
        if len(name) > self.max_length:
            self.max_length = len(name)

    def longest_prefix_item(self, text, start=0):
        """Find the longest name that prefixes ``text[start:]``.

        Raises:
            KeyError: if no name matches.

        Returns:
            tuple: (name, decoded_value)
        """
        node = self.root
        longest_end = start
        longest_value = None
        end = min(len(text), start + self.max_length)
        for i in range(start, end):
            node = node.children.get(text[i])
            if node is None:
                break
            if node.is_terminal:
                longest_end = i + 1
                longest_value = node.value

        if longest_end == start:
            raise KeyError(text[start:end])

        return text[start:longest_end], longest_value

    def __contains__(self, name):
        node = self.root
        for char in name:
            node = node.children.get(char)
            if node is None:
                return False
        return node.is_terminal
