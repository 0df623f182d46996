"""Per-model stage pipeline: markup -> styling -> behavior."""

import dataclasses
import logging

from core.errors import (
    ProviderError,
    ProviderProtocolError,
    StageDependencyFailure,
)
from core.prompts import build_stage_messages, stage_context
from core.state import STAGES, CodeArtifact, StageProgress, StageRun
from utils.fence import FenceExtractor
from utils.sentinel import SentinelMatcher
from utils.tag_filter import TagFilter

logger = logging.getLogger(__name__)


class ModelPipeline:
    """Runs the three dependent stages for one model within one request.

    run() is a generator of StageProgress events, each carrying the stage's
    running total. Stages run strictly in order because every stage gets the
    finished content of its predecessors as prompt context. Nothing here is
    shared with other pipelines: each stage stream gets its own TagFilter,
    FenceExtractor and SentinelMatcher.
    """

    def __init__(self, model_id, provider, model_name, history, settings,
                 prior=None, cancel=None):
        self.model_id = model_id
        self.provider = provider
        self.model_name = model_name
        self.history = list(history)
        self.settings = settings
        self.cancel = cancel
        prior = prior or CodeArtifact()
        self.artifact = dataclasses.replace(prior)
        self.stages = [StageRun(stage=stage, prior_code=prior.get(stage)) for stage in STAGES]

    def cancelled(self):
        return self.cancel is not None and self.cancel.is_set()

    def run(self):
        results = {}
        for index, run in enumerate(self.stages):
            if self.cancelled():
                logger.debug("%s: cancelled before %s", self.model_id, run.stage)
                return
            try:
                yield from self._run_stage(run, stage_context(run.stage, results))
            except Exception as e:
                self._fail(run, index, e)
            results[run.stage] = run.accumulated
            setattr(self.artifact, run.stage, run.accumulated)

    def _fail(self, run, index, exc):
        run.status = "failed"
        run.error = str(exc)
        if not isinstance(exc, ProviderError):
            # Not a provider fault; the caller reports it as an internal error
            raise exc

        logger.warning("%s: %s stage failed: %s", self.model_id, run.stage, exc)
        skipped = [later.stage for later in self.stages[index + 1:]]
        if skipped:
            raise StageDependencyFailure(run.stage, skipped, exc) from exc
        raise exc

    def _run_stage(self, run, context):
        messages = build_stage_messages(
            run.stage, self.history, context=context,
            prior_code=run.prior_code, sentinel=self.settings.sentinel,
        )
        system_prompt = self.settings.system_prompt(run.stage, self.model_name)
        # Sentinel handling only makes sense when there is something to keep
        matcher = SentinelMatcher(self.settings.sentinel) if run.prior_code else None

        run.status = "streaming"
        logger.debug("%s: %s stage streaming", self.model_id, run.stage)

        fragments = self._code_fragments(messages, system_prompt)
        try:
            for piece in fragments:
                if self.cancelled():
                    return
                released = matcher.feed(piece) if matcher else [piece]
                if matcher and matcher.matched:
                    break
                for text in released:
                    yield self._progress(run, text)
            if matcher:
                for text in matcher.finalize():
                    yield self._progress(run, text)
        finally:
            # Stops the provider call once the block is complete or reverted
            fragments.close()

        if matcher and matcher.matched:
            run.accumulated = run.prior_code
            run.status = "reverted"
            logger.info("%s: %s unchanged, keeping prior code", self.model_id, run.stage)
            yield StageProgress(self.model_id, run.stage, run.accumulated)
        else:
            run.status = "completed"
            logger.debug("%s: %s completed (%d chars)", self.model_id, run.stage,
                         len(run.accumulated))

    def _progress(self, run, text):
        run.accumulated += text
        return StageProgress(self.model_id, run.stage, run.accumulated)

    def _code_fragments(self, messages, system_prompt):
        """Raw provider text -> reasoning stripped -> first fenced block content."""
        tag_filter = TagFilter(self.settings.reasoning_open_tag, self.settings.reasoning_close_tag)
        fence = FenceExtractor()
        stream = self.provider.open_token_stream(self.model_name, messages, system_prompt)
        try:
            for raw in stream:
                if not isinstance(raw, str):
                    raise ProviderProtocolError(
                        f"{self.model_id}: expected a text fragment, got {type(raw).__name__}"
                    )
                for clean in tag_filter.feed(raw):
                    yield from fence.feed(clean)
                    if fence.is_complete():
                        return
            for clean in tag_filter.finalize():
                yield from fence.feed(clean)
            yield from fence.finalize()
        finally:
            close = getattr(stream, "close", None)
            if close is not None:
                close()
