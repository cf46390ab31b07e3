from __future__ import annotations
import logging
from concurrent.futures import Executor
from typing import Dict, List, Optional, Union

from barcode import PersistencePair
from boundary import FilteredChainComplex
from field import F2, Field
from filtration import Filtration
from reducer import ReducedFilteredChainComplex, ReductionFlags
from right_filtration import RightFiltration
from zigzag import ZigzagReducer

logger = logging.getLogger(__name__)


def barcode(
    F: Union[Filtration, RightFiltration],
    field: Field = F2,
    flags: Optional[ReductionFlags] = None,
    *,
    executor: Optional[Executor] = None,
    timeout: Optional[float] = None,
) -> Dict[int, List[PersistencePair]]:
    """
    Barcode of a monotone or right filtration.

    executor and timeout apply to monotone filtrations only (see
    ReducedFilteredChainComplex); dimensions that time out are left out.
    """
    if isinstance(F, RightFiltration):
        if executor is not None:
            raise ValueError("zigzag reduction is sequential; executor is not supported")
        F.validate()
        bars = ZigzagReducer(F, field, flags).run().barcode()
    else:
        F.validate()
        FC = FilteredChainComplex.from_filtration(F, field)
        bars = ReducedFilteredChainComplex(FC, flags, executor=executor, timeout=timeout).barcode()
    logger.info(
        "barcode over %r: %s",
        field, ", ".join(f"H{k}={len(v)}" for k, v in sorted(bars.items())) or "empty",
    )
    return bars
