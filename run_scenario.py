"""Run a scenario file against a directory of screenshots.

Actions are not injected into any device, they are only logged, which makes
this script handy to check a scenario against recorded captures:

    python run_scenario.py scenario.yaml captures/ --templates templates/
"""
import argparse
import asyncio

from autoscene.core.logger import logger, setup_logger
from autoscene.core.thread_pool import shutdown_pools
from autoscene.modules.detection import TemplateImageDetector
from autoscene.modules.processing import DirectoryFrameSource, LoggingProgressListener, ScenarioRunner
from autoscene.modules.scenario import load_scenario
from autoscene.modules.vision import TemplateSupplier


def log_actions(actions, position):
    for action in actions:
        logger.info("[dry-run] {} {} params={} position={}", action.type, action.name, action.params, position)


async def main(args) -> int:
    scenario = load_scenario(args.scenario)
    runner = ScenarioRunner(
        scenario,
        detector=TemplateImageDetector(),
        bitmap_supplier=TemplateSupplier(args.templates),
        action_performer=log_actions,
        frame_source=DirectoryFrameSource(args.frames, loop=args.loop),
        progress_listener=LoggingProgressListener() if args.trace else None,
        frame_interval_ms=args.interval,
    )
    try:
        await runner.run()
    finally:
        await runner.stop()
        shutdown_pools()
    logger.info("Processed {} frame(s), end counts: {}", runner.frames_processed,
                runner.processor.end_condition_tracker.counts)
    return 0


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description=__doc__.splitlines()[0])
    parser.add_argument("scenario", help="scenario YAML file")
    parser.add_argument("frames", help="directory of screenshots, processed in name order")
    parser.add_argument("--templates", default=None, help="template directory (default: TEMPLATE_DIR setting)")
    parser.add_argument("--interval", type=int, default=0, help="delay between frames in ms")
    parser.add_argument("--loop", action="store_true", help="replay the frames until the scenario stops")
    parser.add_argument("--trace", action="store_true", help="log detection progress (DEBUG level)")
    setup_logger()
    raise SystemExit(asyncio.run(main(parser.parse_args())))
