import types

from infrastructure.providers.anthropic import compute_usage_breakdown


def _mk_usage(
    *,
    input_tokens: int,
    cache_creation_input_tokens: int,
    cache_read_input_tokens: int,
    output_tokens: int,
    cache_creation_obj=None,
):
    u = types.SimpleNamespace()
    u.input_tokens = input_tokens
    u.cache_creation_input_tokens = cache_creation_input_tokens
    u.cache_read_input_tokens = cache_read_input_tokens
    u.output_tokens = output_tokens
    u.cache_creation = cache_creation_obj
    return u


def test_breakdown_wins_over_total():
    usage = _mk_usage(
        input_tokens=10,
        cache_creation_input_tokens=999,  # conflicting total
        cache_read_input_tokens=3,
        output_tokens=7,
        cache_creation_obj={"ephemeral_5m_input_tokens": 4, "ephemeral_1h_input_tokens": 5},
    )
    out = compute_usage_breakdown(usage, cache_ttl="5m")
    assert out.cache_creation_total == 9
    assert out.created_5m == 4
    assert out.created_1h == 5
    assert out.input_tokens == 10 + 9 + 3
    assert out.total_tokens == 10 + 9 + 3 + 7


def test_breakdown_read_from_attribute_object():
    usage = _mk_usage(
        input_tokens=1,
        cache_creation_input_tokens=2,
        cache_read_input_tokens=0,
        output_tokens=0,
        cache_creation_obj=types.SimpleNamespace(ephemeral_5m_input_tokens=0, ephemeral_1h_input_tokens=2),
    )
    out = compute_usage_breakdown(usage, cache_ttl="5m")
    assert out.created_1h == 2
    assert out.created_5m == 0


def test_ttl_fallback_attributes_all_to_1h():
    usage = _mk_usage(
        input_tokens=10,
        cache_creation_input_tokens=6,
        cache_read_input_tokens=2,
        output_tokens=1,
        cache_creation_obj=None,  # no breakdown
    )
    out = compute_usage_breakdown(usage, cache_ttl="1h")
    assert out.created_1h == 6
    assert out.created_5m == 0
    assert out.input_tokens == 10 + 6 + 2


def test_ttl_fallback_attributes_all_to_5m():
    usage = _mk_usage(
        input_tokens=10,
        cache_creation_input_tokens=6,
        cache_read_input_tokens=2,
        output_tokens=1,
        cache_creation_obj=None,  # no breakdown
    )
    out = compute_usage_breakdown(usage, cache_ttl=None)
    assert out.created_5m == 6
    assert out.created_1h == 0
    assert out.input_tokens == 10 + 6 + 2
