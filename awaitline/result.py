from typing import Any, Dict, Iterator, List, Optional


class SequenceResult:
    """
    A record of what a sequence block produced.

    Holds every emitted line in order, the return value of each procedure
    (by name, as an attribute, or unpacked in start order), per-procedure
    timings in time units, and the earliest failure, if any.
    """

    def __init__(self) -> None:
        """
        Initializes an empty result record.
        """
        self.lines: List[str] = []
        self.timings: Dict[str, float] = {}
        self.exception: Optional[BaseException] = None
        self._results: Dict[str, Any] = {}
        self._start_order: List[str] = []

    def __getitem__(self, key: str) -> Any:
        """
        Retrieves a procedure's result by its name.
        Args:
            key: The procedure name, suffixed `_2`, `_3`... for repeat calls.
        Returns:
            The value the procedure returned.
        """
        return self._results[key]

    def __getattr__(self, name: str) -> Any:
        """
        Retrieves a procedure's result as an attribute, e.g. `result.worker`.
        """
        results = self.__dict__.get("_results", {})
        if name in results:
            return results[name]
        raise AttributeError(f"'{type(self).__name__}' object has no attribute '{name}'")

    def __contains__(self, key: object) -> bool:
        """
        Returns True if a procedure with this name finished successfully.
        """
        return key in self._results

    def __iter__(self) -> Iterator[Any]:
        """
        Returns an iterator over the results in the order the procedures started.
        """
        return (self._results[key] for key in self._start_order if key in self._results)

    def __len__(self) -> int:
        """
        Returns the number of procedure results currently available.
        """
        return len(self._results)

    @property
    def final(self) -> Any:
        """
        Returns the result of the last procedure started in the block.
        Returns:
            The final procedure's result, or None if no procedure was
            started or it did not finish.
        """
        if not self._start_order:
            return None
        return self._results.get(self._start_order[-1])

    def _register(self, name: str) -> str:
        """Reserves a unique result key for a procedure about to start."""
        key = name
        n = 2
        while key in self._start_order:
            key = f"{name}_{n}"
            n += 1
        self._start_order.append(key)
        return key

    def _add_line(self, line: str) -> None:
        """Appends an emitted line."""
        self.lines.append(line)

    def _set_result(self, key: str, value: Any) -> None:
        """Sets the result for a given procedure key."""
        self._results[key] = value

    def _add_timing(self, key: str, units: float) -> None:
        """Records when a procedure finished, in units since the block began."""
        self.timings[key] = units

    def _set_exception(self, error: BaseException) -> None:
        """Keeps only the first failure."""
        if self.exception is None:
            self.exception = error
