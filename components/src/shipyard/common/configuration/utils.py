# SPDX-FileCopyrightText: Copyright (c) 2025-2026 NVIDIA CORPORATION & AFFILIATES. All rights reserved.
# SPDX-License-Identifier: Apache-2.0

"""Helpers for building argparse options that fall back to environment variables."""

import argparse
import os
from typing import Any, Callable, Optional, TypeVar, Union

T = TypeVar("T")

_TRUE_VALUES = ("true", "1", "yes", "on")


def env_or_default(
    env_var: str,
    default: T,
    value_type: Optional[Union[type, Callable[..., Any]]] = None,
) -> T:
    """
    Get value from environment variable or return default.

    Args:
        env_var: Environment variable name (e.g., "SHIPYARD_NAMESPACE")
        default: Default value if env var not set
        value_type: Conversion applied to the env value. If None, the type of
            ``default`` is used; if both are None the raw string is returned.

    Returns:
        Environment variable value (type-converted) or default
    """
    value = os.environ.get(env_var)
    if value is None:
        return default

    if value_type is None and default is None:
        return value  # type: ignore[return-value]

    target_type = value_type if value_type is not None else type(default)

    if target_type is bool:
        return value.lower() in _TRUE_VALUES  # type: ignore
    if target_type is int:
        return int(value)  # type: ignore
    if target_type is float:
        return float(value)  # type: ignore
    if target_type is list:
        # comma or whitespace separated
        return [x.strip() for x in value.replace(",", " ").split() if x.strip()]  # type: ignore

    return target_type(value) if callable(target_type) else value  # type: ignore


def add_argument(
    parser,
    *,
    flag_name: str,
    env_var: str,
    default: Any,
    help: str,
    arg_type: Optional[Union[type, Callable[..., Any]]] = str,
    **kwargs: Any,
) -> None:
    """
    Add a CLI argument whose default is read from ``env_var`` when set.

    The help text is suffixed with the env var name and the default value.

    Args:
        parser: ArgumentParser or argument group
        flag_name: Primary flag (must start with '--', e.g., "--namespace")
        env_var: Environment variable name (e.g., "SHIPYARD_NAMESPACE")
        default: Default value
        help: Help text
        arg_type: Type for the argument (default: str). None for flag actions.
        **kwargs: Passed through to ``parser.add_argument`` (dest, choices, nargs, ...)
    """
    arg_dest = _get_dest_name(flag_name, kwargs.pop("dest", None))

    value_type_for_env: Optional[Union[type, Callable[..., Any]]] = None
    if isinstance(default, list):
        value_type_for_env = list
    elif arg_type is not None:
        value_type_for_env = arg_type
    default_with_env = env_or_default(env_var, default, value_type=value_type_for_env)

    opts = {
        "dest": arg_dest,
        "default": default_with_env,
        "help": _build_help_message(help, env_var, default),
    }
    if arg_type is not None:
        opts["type"] = arg_type
    kwargs.update(opts)

    parser.add_argument(flag_name, **kwargs)


def add_negatable_bool_argument(
    parser,
    *,
    flag_name: str,
    env_var: str,
    default: bool,
    help: str,
    dest: Optional[str] = None,
) -> None:
    """
    Add negatable boolean flag (--foo / --no-foo).
    """
    add_argument(
        parser,
        flag_name=flag_name,
        env_var=env_var,
        default=default,
        help=help,
        dest=dest,
        arg_type=None,
        action=argparse.BooleanOptionalAction,
    )


def _build_help_message(help_text: str, env_var: str, default: Any) -> str:
    return f"{help_text}\nenv var: {env_var} | default: {default}"


def _get_dest_name(flag_name: str, dest: Optional[str] = None) -> str:
    return dest if dest else flag_name.lstrip("-").replace("-", "_")
