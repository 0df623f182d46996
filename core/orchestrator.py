"""Request orchestrator - runs one stage pipeline per selected model, concurrently."""

import logging
import queue
import threading

from core.errors import MultiForgeError, OrchestrationInputError
from core.pipeline import ModelPipeline
from core.state import CodeArtifact, ModelDone, ModelError

logger = logging.getLogger(__name__)


class Orchestrator:
    """Fans a generation request out to every selected model.

    Each model's pipeline runs on its own worker thread; their events are
    merged through a queue into one ordered sequence. A failure in one
    pipeline becomes a single ModelError for that model and never reaches
    the others. The orchestrator itself holds only the settings, so one
    instance serves any number of concurrent requests.
    """

    def __init__(self, settings):
        self.settings = settings

    def create_pipeline(self, model_id, history, prior=None, cancel=None):
        """Resolve the provider and build a pipeline. Raises OrchestrationInputError."""
        provider, model_name = self.settings.registry.resolve(model_id)
        return ModelPipeline(
            model_id, provider, model_name, history, self.settings,
            prior=prior, cancel=cancel,
        )

    def stream(self, models, history, prior_codes=None):
        """Yield StageProgress / ModelError / ModelDone events from all models.

        Ends after every model has reported either ModelDone or ModelError.
        Closing the generator early signals the workers to stop.
        """
        models = list(dict.fromkeys(models))
        prior_codes = prior_codes or {}
        events = queue.Queue()
        cancel = threading.Event()

        for model_id in models:
            worker = threading.Thread(
                target=self._run_model,
                args=(model_id, history, prior_codes.get(model_id), events, cancel),
                name=f"pipeline:{model_id}",
                daemon=True,
            )
            worker.start()

        remaining = len(models)
        try:
            while remaining:
                event = events.get()
                if isinstance(event, (ModelDone, ModelError)):
                    remaining -= 1
                yield event
        finally:
            cancel.set()

    def run_model(self, model_id, history, prior=None, cancel=None):
        """Run a single model's pipeline synchronously, yielding its events."""
        try:
            prior = self._coerce_prior(model_id, prior)
            pipeline = self.create_pipeline(model_id, history, prior=prior, cancel=cancel)
            yield from pipeline.run()
        except MultiForgeError as e:
            logger.warning("Model %s failed: %s", model_id, e)
            yield ModelError(model_id, str(e))
            return
        except Exception as e:
            logger.exception("Unexpected error in pipeline for %s", model_id)
            yield ModelError(model_id, f"Internal error: {e}")
            return

        logger.info("Model %s done", model_id)
        yield ModelDone(model_id, pipeline.artifact)

    @staticmethod
    def _coerce_prior(model_id, prior):
        if prior is None or isinstance(prior, CodeArtifact):
            return prior
        try:
            return CodeArtifact.from_dict(prior)
        except ValueError as e:
            raise OrchestrationInputError(f"Invalid prior code for {model_id}: {e}") from e

    def _run_model(self, model_id, history, prior, events, cancel):
        for event in self.run_model(model_id, history, prior=prior, cancel=cancel):
            if cancel.is_set():
                return
            events.put(event)
