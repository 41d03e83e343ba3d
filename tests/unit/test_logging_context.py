import asyncio
import logging

from infrastructure.observability.logging import (
    ContextInjectFilter,
    clear_node_context,
    get_log_context,
    make_run_tag,
    set_log_context,
)


def test_run_tag_is_short_and_stable() -> None:
    assert make_run_tag("20250301_120000_abcd") == make_run_tag("20250301_120000_abcd")
    assert len(make_run_tag("20250301_120000_abcd")) == 8
    assert make_run_tag("run-a") != make_run_tag("run-b")


def test_each_task_logs_under_its_own_node() -> None:
    ctx_filter = ContextInjectFilter()

    async def augment(node_id: str) -> str:
        set_log_context(node_id=node_id)
        await asyncio.sleep(0)
        record = logging.LogRecord("wb", logging.INFO, __file__, 1, "msg", None, None)
        ctx_filter.filter(record)
        clear_node_context()
        return record.node

    async def scenario() -> list[str]:
        return await asyncio.gather(augment("l1-0-l2-0"), augment("l1-1-l2-1"))

    assert asyncio.run(scenario()) == ["l1-0-l2-0", "l1-1-l2-1"]
    assert get_log_context()["node_id"] == "-"
