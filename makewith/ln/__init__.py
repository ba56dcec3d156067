# Copyright (c) 2025, HaiyangLi <quantocean.li at gmail dot com>
# SPDX-License-Identifier: Apache-2.0

from ._lazy_init import LazyInit
from ._sentinel import (
    SingletonType,
    Undefined,
    UndefinedType,
    Unset,
    UnsetType,
)
from ._utils import (
    SignatureShape,
    continuation_parameter,
    function_name,
    is_record,
    positional_arity,
    signature_shape,
    synchronized,
)

__all__ = (
    "LazyInit",
    "SignatureShape",
    "SingletonType",
    "Undefined",
    "UndefinedType",
    "Unset",
    "UnsetType",
    "continuation_parameter",
    "function_name",
    "is_record",
    "positional_arity",
    "signature_shape",
    "synchronized",
)
