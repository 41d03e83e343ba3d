"""
CLI entrypoint for the keyword workbench pipeline.

This script performs the following steps:
- loads .env, configs/workbench.yaml
- creates a per-run output folder under outputs/
- generates a keyword map for the seed keywords via the selected provider adapter
- augments the requested sub-core keywords with more LSI terms (concurrently)
- applies the requested selection and (optionally) translates it
- saves the selection as a versioned sub-project
- writes tree.json / subproject.json and logs a usage summary
"""

import argparse
import asyncio
import json
import logging
from datetime import datetime
from pathlib import Path

import opik
from dotenv import load_dotenv
from opik import track

from application import (
    KeywordGenerationService,
    KeywordWorkbench,
    SaveRequest,
    format_subproject_context,
    write_subproject,
    write_tree_snapshot,
)
from application.constants import (
    CONFIG_SNAPSHOT_FILENAME,
    CONTEXT_FILENAME,
    LOG_FILENAME,
    OUTPUT_ROOT,
    SUBPROJECT_FILENAME,
    TREE_FILENAME,
)
from domain.errors import WorkbenchError
from infrastructure.config import Provider, WorkbenchConfig, load_workbench_config
from infrastructure.constants import WORKBENCH_FILE
from infrastructure.io import ensure_exists
from infrastructure.observability import annotate_current_span, configure_logging, make_run_tag, set_log_context
from infrastructure.persistence import make_persistence
from infrastructure.prompting import PromptManager
from infrastructure.providers import make_adapter

logger = logging.getLogger(__name__)

SELECT_ALL = "all"


def _parse_args() -> argparse.Namespace:
    p = argparse.ArgumentParser(description="Generate, curate and save a keyword taxonomy")
    p.add_argument("--seed", type=str, required=True, help="Seed keywords (free text, comma separated).")
    p.add_argument("--instructions", type=str, default="", help="Additional instructions for generation.")
    p.add_argument(
        "--augment",
        nargs="*",
        default=[],
        metavar="LEVEL2_ID",
        help="Sub-core keyword ids to extend with more LSI terms, e.g. l1-0-l2-1.",
    )
    p.add_argument(
        "--select",
        nargs="*",
        default=[],
        metavar="NODE_ID",
        help=f"Node ids to check (cascades to descendants). Use '{SELECT_ALL}' to check the whole tree.",
    )
    p.add_argument("--translate", action="store_true", help="Translate the selected keywords.")
    p.add_argument("--name", type=str, default=None, help="Save the selection as a sub-project with this name.")
    parent = p.add_mutually_exclusive_group()
    parent.add_argument("--project", type=str, default=None, help="Existing parent project id.")
    parent.add_argument("--new-project", type=str, default=None, help="Create a new parent project with this name.")
    p.add_argument(
        "--config",
        type=str,
        default=str(WORKBENCH_FILE),
        help="Path to workbench.yaml (default: configs/workbench.yaml)",
    )
    p.add_argument(
        "--env",
        type=str,
        default=".env",
        help="Path to .env file (default: .env)",
    )
    p.add_argument(
        "--mock",
        action="store_true",
        help="Use the Mock adapter instead of calling a real provider.",
    )
    p.add_argument(
        "--console-level",
        type=str,
        default="INFO",
        choices=["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"],
        help="Console log level",
    )
    p.add_argument(
        "--file-level",
        type=str,
        default="DEBUG",
        choices=["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"],
        help="File log level",
    )
    return p.parse_args()


async def _run_session(args: argparse.Namespace, cfg: WorkbenchConfig, run_dir: Path) -> None:
    adapter = make_adapter(cfg, use_mock=bool(args.mock))
    persistence = make_persistence(cfg)
    generator = KeywordGenerationService(cfg, adapter, PromptManager(prompts_root=cfg.prompts_root))
    wb = KeywordWorkbench(generator, persistence)

    try:
        tree = await wb.generate(args.seed, args.instructions)
        logger.info("Core user intent: %s", wb.core_user_intent or "-")

        # Augment concurrently; one node failing does not affect the others.
        if args.augment:
            results = await asyncio.gather(*(wb.augment(node_id) for node_id in args.augment), return_exceptions=True)
            for node_id, res in zip(args.augment, results):
                if isinstance(res, WorkbenchError):
                    logger.error("Augmentation of %s failed: %s", node_id, res)
                elif isinstance(res, BaseException):
                    raise res
                else:
                    logger.info("Augmented %s with %d new terms", node_id, len(res))

        tree = wb.tree or tree
        targets = [root.id for root in tree.roots] if SELECT_ALL in args.select else args.select
        for node_id in targets:
            wb.toggle(node_id, True)
        logger.info("Selected %d nodes", wb.selection_count)

        if args.translate:
            added = await wb.translate()
            logger.info("Translated %d selected nodes", len(added))

        write_tree_snapshot(
            run_dir / TREE_FILENAME,
            wb.tree or tree,
            selection=wb.selection,
            translations=wb.translations,
            core_user_intent=wb.core_user_intent,
            model_used=wb.model_used,
            seed_keywords=wb.seed_keywords,
        )

        if args.name is not None:
            request = SaveRequest(
                name=args.name or wb.suggest_subproject_name(),
                parent_project_id=args.project,
                create_new_project=args.new_project is not None,
                new_project_name=args.new_project or "",
            )
            stored = await wb.save(request)
            write_subproject(run_dir / SUBPROJECT_FILENAME, stored)
            (run_dir / CONTEXT_FILENAME).write_text(format_subproject_context(stored), encoding="utf-8")
            logger.info("Saved sub-project %r (id=%s, parent=%s)", stored.name, stored.id, stored.parent_project_id)
    finally:
        await adapter.aclose()
        await persistence.aclose()

    usage = generator.usage.as_dict()
    logger.info(
        "Usage: calls=%d, input_tokens=%d, output_tokens=%d, total_tokens=%d, cost=$%.6f",
        usage["calls"],
        usage["input_tokens"],
        usage["output_tokens"],
        usage["total_tokens"],
        usage["total_cost_usd"],
    )


@track(
    name="Keywords.workbench",
    type="general",
    metadata={"task": "keyword_workbench"},
    capture_input=False,
    capture_output=False,
    flush=True,
)
def main() -> None:
    args = _parse_args()

    env_file = Path(args.env)
    if env_file.exists():
        load_dotenv(env_file, override=True)

    config_path = Path(args.config)
    ensure_exists(config_path, "workbench.yaml")

    cfg = load_workbench_config(config_path, provider_override=Provider.MOCK if args.mock else None)

    if not args.mock:
        opik.configure()

    # ---- Per-run output folder ----
    ts = datetime.now().strftime("%Y%m%d_%H%M%S")
    run_id = f"{ts}_{cfg.provider.value}_{cfg.model}".replace("/", "-").replace(":", "-")

    run_dir = OUTPUT_ROOT / run_id
    run_dir.mkdir(parents=True, exist_ok=True)

    log_path = run_dir / LOG_FILENAME
    configure_logging(
        log_file=log_path,
        console_level=getattr(logging, args.console_level),
        file_level=getattr(logging, args.file_level),
    )

    set_log_context(
        run_id_full=run_id,
        provider=str(cfg.provider.value),
        model=str(cfg.model),
    )

    logger.info("Starting run: run_id=%s (run_tag=%s)", run_id, make_run_tag(run_id))
    logger.info("Run output directory: %s", run_dir)

    (run_dir / CONFIG_SNAPSHOT_FILENAME).write_text(
        json.dumps(cfg.model_dump(mode="json"), ensure_ascii=False, indent=2, default=str),
        encoding="utf-8",
    )

    annotate_current_span(
        name=f"Keywords.run.{cfg.provider.value}_{cfg.model}",
        metadata={"provider": cfg.provider.value, "model": cfg.model, "run_id": run_id},
    )

    try:
        asyncio.run(_run_session(args, cfg, run_dir))
    except WorkbenchError as e:
        logger.error("Run failed: %s", e)
        raise SystemExit(1) from e
    except ValueError as e:
        logger.error("Invalid input: %s", e)
        raise SystemExit(2) from e

    logger.info("Detailed log: %s", log_path)


if __name__ == "__main__":
    main()
