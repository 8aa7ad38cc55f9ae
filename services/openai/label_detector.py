"""Image label detection via the OpenAI Responses API.

The detector reads an object from storage, validates and downscales it with
Pillow, and asks the model to report labels through a strict function tool.
Labels below the confidence floor are dropped and the rest are capped at the
requested maximum.
"""

import json
import logging
import time
from typing import Any, List, Optional

from openai import APIError, AsyncOpenAI

from models.errors import LabelFormatError, LabelRequestError
from services.image_preparer import ImagePreparer
from services.object_store import LocalObjectStore, ObjectStoreError
from services.openai.label_prompts import build_system_prompt, build_user_prompt
from services.openai.label_schema import FUNCTION_DEFINITION, FUNCTION_NAME
from services.openai.media_inputs import build_inputs, to_image_data_url
from services.openai.response_parser import extract_usage, parse_function_call, select_labels

LOGGER = logging.getLogger(__name__)
DEFAULT_MODEL = "gpt-5"


class LabelDetector:
    """Detect labels for stored images."""

    def __init__(
        self,
        client: AsyncOpenAI,
        store: LocalObjectStore,
        model: str = DEFAULT_MODEL,
        preparer: Optional[ImagePreparer] = None,
    ) -> None:
        """Initialize the detector with an OpenAI async client and the object store.

        Args:
            client: Async OpenAI client used for the Responses API call.
            store: Object store the image keys are read from.
            model: Model name for the labeling request.
            preparer: Optional image preparer for dependency injection.
        """
        if client is None:
            raise ValueError("OpenAI client must be provided.")
        self.client = client
        self.store = store
        self.model = model
        self.preparer = preparer or ImagePreparer()
        self.system_prompt = build_system_prompt()

    async def detect_labels(
        self,
        bucket: str,
        key: str,
        max_labels: int = 10,
        min_confidence: float = 70.0,
    ) -> List[str]:
        """Return up to `max_labels` labels with confidence >= `min_confidence`.

        Raises:
            LabelFormatError: If the stored object is not a decodable JPEG/PNG image.
            LabelRequestError: If the object is missing or the model request fails.
        """
        try:
            raw = await self.store.read(bucket, key)
        except ObjectStoreError as exc:
            raise LabelRequestError(str(exc)) from exc

        try:
            prepared = self.preparer.prepare(raw)
        except ValueError as exc:
            raise LabelFormatError(f"{bucket}/{key}: {exc}") from exc

        inputs = build_inputs(
            self.system_prompt,
            build_user_prompt(max_labels, min_confidence),
            image_url=to_image_data_url(prepared),
        )

        start_time = time.time()
        response = await self._create_response(inputs)
        try:
            arguments = parse_function_call(response, tool_name=FUNCTION_NAME)
        except (RuntimeError, json.JSONDecodeError) as exc:
            LOGGER.error("Unparseable label response for %s/%s: %r", bucket, key, response)
            raise LabelRequestError(f"Malformed label response for {bucket}/{key}") from exc

        labels = select_labels(arguments, max_labels=max_labels, min_confidence=min_confidence)
        LOGGER.info(
            "Labels for %s/%s: %s (%.2fs, usage=%s)",
            bucket, key, labels, time.time() - start_time, extract_usage(response),
        )
        return labels

    async def _create_response(self, inputs: List[Any]) -> Any:
        """Send the labeling request to the OpenAI Responses API."""
        try:
            return await self.client.responses.create(
                model=self.model,
                input=inputs,
                tools=[FUNCTION_DEFINITION],
                tool_choice={"type": "function", "name": FUNCTION_NAME},
            )
        except APIError as exc:
            LOGGER.error("Error during OpenAI Responses API call: %s", exc)
            raise LabelRequestError(str(exc)) from exc
