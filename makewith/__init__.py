# Copyright (c) 2025, HaiyangLi <quantocean.li at gmail dot com>
# SPDX-License-Identifier: Apache-2.0

import logging

from . import ln as ln
from ._errors import (
    CapabilityError,
    CompositionError,
    ContractViolationError,
    InputValidationError,
    LayerProtocolError,
)
from .binder import BoundOperation, bind, make_with, provide, provide_to, with_
from .cache import (
    CacheStats,
    ConstructionCache,
    default_cache,
    reset_default_cache,
)
from .capability import (
    Capability,
    OperationDescriptor,
    OperationKind,
    describe,
    operations_of,
    state_of,
    unwrap,
)
from .composition import ComposedOperation, make_with_compose, resolve
from .config import BinderSettings, settings
from .factory import enrich
from .layered import BuilderStage, LayeredBuilder, layer, make_layered
from .ln import Undefined, Unset
from .table import (
    OperationTable,
    chainable,
    collect_fns,
    compose,
    make,
    make_chainable,
    rebind,
)
from .version import __version__

logger = logging.getLogger(__name__)
logger.setLevel(settings.log_level)

__all__ = (
    "__version__",
    "BinderSettings",
    "BoundOperation",
    "BuilderStage",
    "CacheStats",
    "Capability",
    "CapabilityError",
    "ComposedOperation",
    "CompositionError",
    "ConstructionCache",
    "ContractViolationError",
    "InputValidationError",
    "LayerProtocolError",
    "LayeredBuilder",
    "OperationDescriptor",
    "OperationKind",
    "OperationTable",
    "Undefined",
    "Unset",
    "bind",
    "chainable",
    "collect_fns",
    "compose",
    "default_cache",
    "describe",
    "enrich",
    "layer",
    "ln",
    "logger",
    "make",
    "make_chainable",
    "make_layered",
    "make_with",
    "make_with_compose",
    "operations_of",
    "provide",
    "provide_to",
    "rebind",
    "reset_default_cache",
    "resolve",
    "settings",
    "state_of",
    "unwrap",
    "with_",
)
