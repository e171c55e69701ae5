# tests/property/conftest.py
"""Shared Hypothesis strategies for property-based tests.

Strategy Categories:
- Stored pass counts (well-formed, malformed, absent)
- Attribute maps that may or may not carry the counter
- Valid processor configurations
"""

from __future__ import annotations

from hypothesis import strategies as st

from repeater.plugins.processors.repeat_counter import REPEATER_COUNT_ATTR, RepeatCounterConfig

# Counters a healthy pipeline writes: non-negative decimals
well_formed_counts = st.integers(min_value=0, max_value=10_000).map(str)

# Anything that is not an optionally signed decimal fitting 32 bits
malformed_counts = st.one_of(
    st.just(""),
    st.text(alphabet=st.characters(exclude_categories=("Nd", "Cs")), min_size=1, max_size=12),
    st.floats(allow_nan=False, allow_infinity=False).map(lambda f: f"{f:.3f}"),
    st.integers(min_value=0, max_value=999).map(lambda i: f" {i}"),
    st.integers(min_value=2**31, max_value=2**40).map(str),
    st.integers(min_value=11, max_value=6000).map(lambda n: "9" * n),
)

# Other attributes a record might carry alongside the counter
other_attributes = st.dictionaries(
    keys=st.text(min_size=1, max_size=20).filter(lambda k: k != REPEATER_COUNT_ATTR),
    values=st.text(max_size=30),
    max_size=5,
)

configs = st.builds(
    lambda count, penalize: RepeatCounterConfig.from_dict({"Repeat Count": count, "Penalize Repeated Passes": penalize}),
    st.integers(min_value=1, max_value=50),
    st.sampled_from(["true", "false"]),
)
