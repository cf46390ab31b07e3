# reducer.py
from __future__ import annotations
import logging
import math
from concurrent.futures import Executor, wait
from dataclasses import dataclass
from enum import Enum
from itertools import product
from typing import Dict, List, Optional, Set

from barcode import PersistencePair
from boundary import FilteredChainComplex
from errors import BarcodeUnavailable
from reduce import ReductionResult, ReductionStats, reduce_boundary, reduce_matrix

logger = logging.getLogger(__name__)


class Optimization(Enum):
    NONE = "no_optimization"
    CLEARING = "clearing"
    COMPRESSION = "compression"


class Reduction(Enum):
    STANDARD = "standard_reduction"
    EXTRA = "extra_reduction"


@dataclass(frozen=True)
class ReductionFlags:
    """
    Options of a reduction run. None of them changes the barcode.
    - optimization: NONE, CLEARING (top dimension first, skip known births)
      or COMPRESSION (bottom dimension first, drop rows of known deaths)
    - reduction: STANDARD or EXTRA (also clear owned rows above the pivot)
    - apparent_pairs: finalize apparent pairs before the general pass
    """
    optimization: Optimization = Optimization.NONE
    reduction: Reduction = Reduction.STANDARD
    apparent_pairs: bool = False

    @classmethod
    def from_names(cls, *names: str) -> ReductionFlags:
        """
        Build from flag names such as "extra_reduction", "apparent_pairs",
        "clearing", "compression", "no_apparent_pairs" ("-" and a trailing
        "_flag" are accepted).
        """
        opts: Dict[str, object] = {}
        for raw in names:
            name = raw.strip().lower().replace("-", "_")
            if name.endswith("_flag"):
                name = name[: -len("_flag")]
            if name == "apparent_pairs":
                opts["apparent_pairs"] = True
            elif name == "no_apparent_pairs":
                opts["apparent_pairs"] = False
            elif name in {o.value for o in Optimization}:
                opts["optimization"] = Optimization(name)
            elif name in {r.value for r in Reduction}:
                opts["reduction"] = Reduction(name)
            else:
                raise ValueError(f"unknown reduction flag '{raw}'")
        return cls(**opts)

    @classmethod
    def all_combinations(cls) -> List[ReductionFlags]:
        return [cls(o, r, a) for o, r, a in product(Optimization, Reduction, (False, True))]


class ReducedFilteredChainComplex:
    """
    Persistence reduction of a FilteredChainComplex.

    Each boundary matrix d_k is reduced on a copy; reductions[k] keeps the
    reduced matrix and its low map. Pairs of H_k are read from
    reductions[k] (which k-cells are positive) and reductions[k + 1]
    (which k-cells get killed).

    With an executor, every dimension is an independent task; dimensions
    not finished within timeout end up in `unavailable`. A task that had
    already started is only cancelled if the executor still holds it, so a
    worker may keep computing after its dimension is marked unavailable;
    its result is never read. Shut the executor down to reclaim it.
    """

    def __init__(
        self,
        FC: FilteredChainComplex,
        flags: Optional[ReductionFlags] = None,
        *,
        executor: Optional[Executor] = None,
        timeout: Optional[float] = None,
    ) -> None:
        self.FC = FC
        self.flags = flags or ReductionFlags()
        self.reductions: List[Optional[ReductionResult]] = [None] * (FC.maxdim + 1)
        self.unavailable: Set[int] = set()
        self.stats = ReductionStats()

        if executor is not None:
            if self.flags.optimization is not Optimization.NONE:
                raise ValueError(
                    f"{self.flags.optimization.value} couples dimensions; "
                    "parallel reduction needs Optimization.NONE"
                )
            self._reduce_parallel(executor, timeout)
        elif self.flags.optimization is Optimization.CLEARING:
            for k in range(FC.maxdim, -1, -1):
                self._reduce_dim(k)
        else:
            for k in range(FC.maxdim + 1):
                self._reduce_dim(k)

    # --- passes ---

    def _reduce_dim(self, k: int) -> None:
        R = self.FC.boundaries[k].copy()
        opt = self.flags.optimization
        cleared: Set[int] = set()
        compressed = 0
        if opt is Optimization.CLEARING and k < self.FC.maxdim:
            # k-cells killed in dimension k + 1 are births: their columns reduce to 0
            cleared = set(self.reductions[k + 1].birth_to_death)
        if opt is Optimization.COMPRESSION and k >= 2:
            # rows of negative (k-1)-cells never become pivots here
            low = self.reductions[k - 1].lowest_row_of_col
            negative = {i for i, r in enumerate(low) if r is not None}
            for col in R:
                compressed += col.drop_rows(negative)

        result = reduce_matrix(
            R,
            extra=self.flags.reduction is Reduction.EXTRA,
            apparent_pairs=self.flags.apparent_pairs,
            cleared=cleared,
        )
        result.stats.compressed_entries += compressed
        if opt is Optimization.COMPRESSION:
            self._discard_zero_persistence(k, result)
        self._store(k, result)

    def _discard_zero_persistence(self, k: int, result: ReductionResult) -> None:
        """Drop reduced columns of pairs with birth == death; only the low map is kept."""
        if k == 0:
            return
        vk, vf = self.FC.vals[k], self.FC.vals[k - 1]
        for j, i in enumerate(result.lowest_row_of_col):
            if i is not None and vf[i] == vk[j]:
                result.matrix[j].clear()
                result.stats.discarded_columns += 1

    def _reduce_parallel(self, executor: Executor, timeout: Optional[float]) -> None:
        extra = self.flags.reduction is Reduction.EXTRA
        futures = {
            k: executor.submit(reduce_boundary, B, extra, self.flags.apparent_pairs)
            for k, B in enumerate(self.FC.boundaries)
        }
        wait(futures.values(), timeout=timeout)
        for k, fut in futures.items():
            if fut.done() and not fut.cancelled():
                self._store(k, fut.result())
            else:
                fut.cancel()
                self.unavailable.add(k)
                logger.warning("dimension %d: reduction did not finish within %ss", k, timeout)

    def _store(self, k: int, result: ReductionResult) -> None:
        self.reductions[k] = result
        self.stats.merge(result.stats)
        s = result.stats
        logger.debug(
            "dimension %d: %d columns, %d pivots, %d additions, %d apparent, %d cleared, %d compressed",
            k, result.matrix.ncol, s.pivots_finalized, s.column_additions,
            s.apparent_pairs, s.cleared_columns, s.compressed_entries,
        )

    # --- results ---

    @property
    def maxdim(self) -> int:
        return self.FC.maxdim

    def _require(self, *dims: int) -> None:
        missing = sorted(k for k in dims if k in self.unavailable)
        if missing:
            raise BarcodeUnavailable(f"reduction of dimension(s) {missing} did not finish")

    def persistence_pairs(self, k: int) -> List[PersistencePair]:
        """
        Bars of H_k sorted by (birth, death). A k-cell is either killed by
        the (k+1)-column owning its row, or positive and never killed
        (death = inf), or negative (it is the death of an H_{k-1} bar).
        """
        if k < 0 or k > self.maxdim:
            return []
        upper = k + 1 <= self.maxdim
        self._require(k, *([k + 1] if upper else []))
        FC = self.FC
        vals_k, perm_k = FC.vals[k], FC.perm[k]
        low_k = self.reductions[k].lowest_row_of_col
        b2d = self.reductions[k + 1].birth_to_death if upper else {}

        pairs: List[PersistencePair] = []
        for i, b in enumerate(vals_k):
            j = b2d.get(i)
            if j is not None:
                pairs.append(PersistencePair(k, b, FC.vals[k + 1][j], perm_k[i], FC.perm[k + 1][j]))
            elif low_k[i] is None:
                pairs.append(PersistencePair(k, b, math.inf, perm_k[i], None))
        pairs.sort(key=PersistencePair.sort_key)
        return pairs

    def hdim(self, k: int) -> int:
        """Number of classes of H_k that never die."""
        return sum(1 for p in self.persistence_pairs(k) if p.death_ind is None)

    def barcode(self) -> Dict[int, List[PersistencePair]]:
        out: Dict[int, List[PersistencePair]] = {}
        for k in range(self.maxdim + 1):
            try:
                out[k] = self.persistence_pairs(k)
            except BarcodeUnavailable:
                logger.warning("dimension %d omitted from barcode: reduction unavailable", k)
        return out

    def __repr__(self) -> str:
        return (
            f"ReducedFilteredChainComplex(maxdim={self.maxdim}, flags={self.flags}, "
            f"additions={self.stats.column_additions})"
        )
