import heapq
from collections.abc import Iterator

from loguru import logger

from src.domain.entities.task_node import TaskNode, normalize_path
from src.domain.errors import AmbiguousOutput, CyclicDependency, DuplicateTask
from src.domain.value_objects.task_action import TaskAction


class TaskGraph:
    """DAG of build tasks.

    Edges are derived from declared paths: task A depends on task B when one
    of A's inputs is one of B's outputs. Call ``build()`` after registering
    every task; it validates the graph and computes a deterministic
    topological order (ties broken by declaration order).
    """

    def __init__(self) -> None:
        self._nodes: dict[str, TaskNode] = {}
        self._producers: dict[str, str] = {}
        self._dependencies: dict[str, set[str]] = {}
        self._dependents: dict[str, set[str]] = {}
        self._order: list[str] | None = None

    def add_task(
        self,
        task_id: str,
        inputs: list[str] | tuple[str, ...],
        outputs: list[str] | tuple[str, ...],
        action: TaskAction,
        artifacts: list[str] | tuple[str, ...] = (),
        description: str = "",
    ) -> TaskNode:
        node = TaskNode(
            id=task_id,
            inputs=tuple(inputs),
            outputs=tuple(outputs),
            action=action,
            artifacts=tuple(artifacts),
            description=description,
        )
        self.add_node(node)
        return node

    def add_node(self, node: TaskNode) -> None:
        if node.id in self._nodes:
            raise DuplicateTask(node.id)
        self._nodes[node.id] = node
        self._order = None

    def build(self) -> "TaskGraph":
        producers: dict[str, str] = {}
        for node in self._nodes.values():
            for output in node.outputs:
                existing = producers.get(output)
                if existing is not None:
                    raise AmbiguousOutput(output, [existing, node.id])
                producers[output] = node.id

        dependencies: dict[str, set[str]] = {task_id: set() for task_id in self._nodes}
        dependents: dict[str, set[str]] = {task_id: set() for task_id in self._nodes}
        for node in self._nodes.values():
            for path in node.inputs:
                producer = producers.get(path)
                if producer is None:
                    continue
                if producer == node.id:
                    raise CyclicDependency([node.id])
                dependencies[node.id].add(producer)
                dependents[producer].add(node.id)

        self._producers = producers
        self._dependencies = dependencies
        self._dependents = dependents
        self._order = self._topological_order()
        logger.debug("Task graph built: {} tasks, order {}", len(self._order), self._order)
        return self

    def _topological_order(self) -> list[str]:
        position = {task_id: i for i, task_id in enumerate(self._nodes)}
        remaining = {task_id: len(deps) for task_id, deps in self._dependencies.items()}
        ready = [(position[t], t) for t, count in remaining.items() if count == 0]
        heapq.heapify(ready)

        order: list[str] = []
        while ready:
            _, task_id = heapq.heappop(ready)
            order.append(task_id)
            for dependent in self._dependents[task_id]:
                remaining[dependent] -= 1
                if remaining[dependent] == 0:
                    heapq.heappush(ready, (position[dependent], dependent))

        if len(order) != len(self._nodes):
            blocked = [t for t in self._nodes if remaining[t] > 0]
            raise CyclicDependency(self._find_cycle(blocked))
        return order

    def _find_cycle(self, candidates: list[str]) -> list[str]:
        """Return one cycle among ``candidates`` in dependency direction."""
        candidate_set = set(candidates)
        visited: set[str] = set()

        for start in candidates:
            if start in visited:
                continue
            stack: list[str] = []
            on_stack: set[str] = set()
            iterators: list[Iterator[str]] = []

            stack.append(start)
            on_stack.add(start)
            iterators.append(iter(sorted(self._dependencies[start] & candidate_set)))

            while stack:
                advanced = False
                for nxt in iterators[-1]:
                    if nxt in on_stack:
                        return stack[stack.index(nxt) :]
                    if nxt not in visited:
                        stack.append(nxt)
                        on_stack.add(nxt)
                        iterators.append(iter(sorted(self._dependencies[nxt] & candidate_set)))
                        advanced = True
                        break
                if not advanced:
                    done = stack.pop()
                    on_stack.discard(done)
                    visited.add(done)
                    iterators.pop()

        # Kahn's algorithm reported leftovers, so a cycle must exist among them
        return sorted(candidate_set)

    @property
    def is_built(self) -> bool:
        return self._order is not None

    @property
    def order(self) -> list[str]:
        if self._order is None:
            raise RuntimeError("TaskGraph.build() must be called first")
        return list(self._order)

    @property
    def nodes(self) -> list[TaskNode]:
        return list(self._nodes.values())

    def get(self, task_id: str) -> TaskNode:
        return self._nodes[task_id]

    def producer_of(self, path: str) -> str | None:
        return self._producers.get(normalize_path(path))

    def dependencies_of(self, task_id: str) -> set[str]:
        return set(self._dependencies.get(task_id, ()))

    def dependents_of(self, task_id: str) -> set[str]:
        return set(self._dependents.get(task_id, ()))

    def transitive_dependents(self, task_id: str) -> set[str]:
        seen: set[str] = set()
        frontier = [task_id]
        while frontier:
            current = frontier.pop()
            for dependent in self._dependents.get(current, ()):
                if dependent not in seen:
                    seen.add(dependent)
                    frontier.append(dependent)
        return seen

    def all_outputs(self) -> list[str]:
        return [output for node in self._nodes.values() for output in node.outputs]

    def __len__(self) -> int:
        return len(self._nodes)

    def __contains__(self, task_id: object) -> bool:
        return task_id in self._nodes

    def __iter__(self) -> Iterator[TaskNode]:
        return iter(self._nodes.values())
