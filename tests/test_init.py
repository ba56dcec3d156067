# Copyright (c) 2025, HaiyangLi <quantocean.li at gmail dot com>
# SPDX-License-Identifier: Apache-2.0

"""Tests for the package surface."""

import logging

import makewith


class TestPackage:
    def test_exports_resolve(self):
        for name in makewith.__all__:
            assert hasattr(makewith, name), name

    def test_version(self):
        assert makewith.__version__ == "0.1.0"

    def test_logger(self):
        assert makewith.logger is logging.getLogger("makewith")
        assert makewith.logger.level == makewith.settings.log_level

    def test_end_to_end(self):
        """Bind, chain, layer and compose through the public surface."""
        api = (
            makewith.layer(
                {"count": 0},
                makewith.chainable(
                    {"add": lambda s, n: {**s, "count": s["count"] + n}}
                ),
            )
            ({"peek": lambda cap: makewith.state_of(cap)["count"]})
            (makewith.compose({"add": lambda cap, n, prev: prev(n * 10)}))
            ()
        )
        assert api.peek() == 0
        assert makewith.state_of(api.add(1).add(2)) == {"count": 12}
