from typing import Any, Callable, Generic, Optional, TypeVar

# T represents the Totally Ordered type used for coordinates (calendar days)
T = TypeVar('T')

class IntervalHandle(Generic[T]):
    """Opaque handle with public accessors for start, end, and data.

    A handle stays bound to its interval until delete(); the tree never moves
    data between nodes, so callers may keep handles as removal tokens.
    """
    __slots__ = ['start', 'end', 'data', 'left', 'right', 'parent', 'max_end', 'height']

    def __init__(self, start: T, end: T, data: Any):
        self.start: T = start
        self.end: T = end
        self.data: Any = data
        self.left: Optional['IntervalHandle[T]'] = None
        self.right: Optional['IntervalHandle[T]'] = None
        self.parent: Optional['IntervalHandle[T]'] = None
        self.max_end: T = end
        self.height: int = 1

class IntervalTree(Generic[T]):
    def __init__(self):
        self.root: Optional[IntervalHandle[T]] = None
        self._size = 0

    def __len__(self) -> int:
        return self._size

    # --- Internal Utilities ---

    def _get_height(self, node: Optional[IntervalHandle[T]]) -> int:
        return node.height if node else 0

    def _update(self, node: Optional[IntervalHandle[T]]):
        if not node: return
        node.height = 1 + max(self._get_height(node.left), self._get_height(node.right))

        m = node.end
        if node.left: m = max(m, node.left.max_end)
        if node.right: m = max(m, node.right.max_end)
        node.max_end = m

    def _replace_child(self, node: IntervalHandle[T], child: Optional[IntervalHandle[T]]):
        """Put child where node hangs in the tree."""
        if child: child.parent = node.parent
        if not node.parent: self.root = child
        elif node is node.parent.left: node.parent.left = child
        else: node.parent.right = child

    def _rotate_left(self, x: IntervalHandle[T]):
        y = x.right
        x.right = y.left
        if y.left: y.left.parent = x
        self._replace_child(x, y)
        y.left = x
        x.parent = y
        self._update(x)
        self._update(y)

    def _rotate_right(self, y: IntervalHandle[T]):
        x = y.left
        y.left = x.right
        if x.right: x.right.parent = y
        self._replace_child(y, x)
        x.right = y
        y.parent = x
        self._update(y)
        self._update(x)

    def _rebalance(self, node: Optional[IntervalHandle[T]]):
        while node:
            self._update(node)
            balance = self._get_height(node.left) - self._get_height(node.right)
            if balance > 1:
                if self._get_height(node.left.left) < self._get_height(node.left.right):
                    self._rotate_left(node.left)
                self._rotate_right(node)
            elif balance < -1:
                if self._get_height(node.right.right) < self._get_height(node.right.left):
                    self._rotate_right(node.right)
                self._rotate_left(node)
            node = node.parent


    # --- Public API ---

    def insert(self, start: T, end: T, data: Any) -> IntervalHandle[T]:
        new_node = IntervalHandle(start, end, data)
        self._size += 1
        if not self.root:
            self.root = new_node
            return new_node

        curr = self.root
        parent = None
        while curr:
            parent = curr
            if start < curr.start: curr = curr.left
            else: curr = curr.right

        new_node.parent = parent
        if start < parent.start: parent.left = new_node
        else: parent.right = new_node

        self._rebalance(new_node)
        return new_node

    def delete(self, handle: IntervalHandle[T]):
        """Unlink handle from the tree. Other handles stay valid."""
        if not handle: return
        if not handle.left or not handle.right:
            rebalance_point = handle.parent
            self._replace_child(handle, handle.left or handle.right)
        else:
            # Splice the in-order successor into handle's position
            succ = handle.right
            while succ.left: succ = succ.left
            if succ.parent is handle:
                rebalance_point = succ
            else:
                rebalance_point = succ.parent
                self._replace_child(succ, succ.right)
                succ.right = handle.right
                succ.right.parent = succ
            self._replace_child(handle, succ)
            succ.left = handle.left
            succ.left.parent = succ

        handle.left = handle.right = handle.parent = None
        handle.height = 1
        handle.max_end = handle.end
        self._size -= 1
        self._rebalance(rebalance_point)


    # --- Search Methods ---

    def find_overlapping(self, point: T, callback: Callable[[IntervalHandle[T]], None]):
        """Finds intervals that cover a specific point."""
        def _search(node):
            if not node or point > node.max_end: return
            if node.left and node.left.max_end >= point: _search(node.left)
            if node.start <= point and node.end >= point: callback(node)
            if node.start <= point: _search(node.right)
        _search(self.root)

    def overlapping(self, point: T) -> list[IntervalHandle[T]]:
        """List of handles whose interval covers point, in start order."""
        found: list[IntervalHandle[T]] = []
        self.find_overlapping(point, found.append)
        return found


    # --- Debug Tool ---

    def verify_integrity(self):
        """Crashes if AVL height, max_end, ordering or parent links are violated."""
        def _walk(node):
            if not node: return 0, None

            for child in (node.left, node.right):
                if child and child.parent is not node:
                    raise RuntimeError(f"Parent link violation at {node.start}")
            if node.left and node.left.start > node.start:
                raise RuntimeError(f"Order violation at {node.start}")
            if node.right and node.right.start < node.start:
                raise RuntimeError(f"Order violation at {node.start}")

            left_h, left_max = _walk(node.left)
            right_h, right_max = _walk(node.right)

            # Check AVL Balance
            if abs(left_h - right_h) > 1:
                raise RuntimeError(f"AVL Violation at {node.start}")

            # Check Augmentation
            expected_max = max(m for m in (node.end, left_max, right_max) if m is not None)
            if node.max_end != expected_max:
                raise RuntimeError(f"MaxEnd Violation at {node.start}")

            return 1 + max(left_h, right_h), expected_max

        if self.root and self.root.parent is not None:
            raise RuntimeError("Root has a parent")
        _walk(self.root)
