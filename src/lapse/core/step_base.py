"""Base class for all pipeline steps.

Every step declares typed Input, Output, Config via Pydantic models.
The orchestrator chains steps through these models, and the CLI
introspects them through their JSON schemas.
"""

from __future__ import annotations

import logging
import time
from abc import ABC, abstractmethod
from typing import ClassVar, Generic, TypeVar

from pydantic import BaseModel

from .capabilities import Capabilities
from .workspace import Workspace

InputT = TypeVar("InputT", bound=BaseModel)
OutputT = TypeVar("OutputT", bound=BaseModel)
ConfigT = TypeVar("ConfigT", bound=BaseModel)

logger = logging.getLogger(__name__)


class BaseStep(ABC, Generic[InputT, OutputT, ConfigT]):
    """Abstract base for pipeline steps.

    Subclasses must:
    1. Define concrete Pydantic models for InputT, OutputT, ConfigT
    2. Set class variables: input_type, output_type, config_type
    3. Implement run() and validate_inputs()

    Example:
        class SortFramesStep(BaseStep[SortFramesInput, SortFramesOutput, SortFramesConfig]):
            input_type = SortFramesInput
            output_type = SortFramesOutput
            config_type = SortFramesConfig

            def run(self, inputs: SortFramesInput) -> SortFramesOutput: ...
            def validate_inputs(self, inputs: SortFramesInput) -> bool: ...

    ``validate_inputs`` may return False (execute then raises ``input_error``)
    or raise a more specific LapseError itself.
    """

    name: ClassVar[str] = ""
    input_type: ClassVar[type[BaseModel]]
    output_type: ClassVar[type[BaseModel]]
    config_type: ClassVar[type[BaseModel]]
    input_error: ClassVar[type[Exception]] = ValueError

    def __init__(
        self,
        config: ConfigT,
        workspace: Workspace,
        capabilities: Capabilities | None = None,
        max_workers: int = 1,
    ):
        self.config = config
        self.workspace = workspace
        self.capabilities = capabilities or Capabilities.default()
        self.max_workers = max(1, max_workers)

    @abstractmethod
    def run(self, inputs: InputT) -> OutputT:
        """Execute this pipeline step. Returns output model."""
        ...

    @abstractmethod
    def validate_inputs(self, inputs: InputT) -> bool:
        """Check that all required input artifacts exist and are valid."""
        ...

    def execute(self, inputs: InputT) -> OutputT:
        """Run with logging, timing, and validation."""
        step_name = self.name or self.__class__.__name__
        logger.info(f"[{step_name}] Validating inputs...")

        if not self.validate_inputs(inputs):
            raise self.input_error(f"[{step_name}] Input validation failed")

        logger.info(f"[{step_name}] Starting...")
        t0 = time.time()
        result = self.run(inputs)
        elapsed = time.time() - t0
        logger.info(f"[{step_name}] Done in {elapsed:.1f}s")
        return result

    @classmethod
    def get_input_schema(cls) -> dict:
        """Return JSON schema for inputs."""
        return cls.input_type.model_json_schema()

    @classmethod
    def get_output_schema(cls) -> dict:
        """Return JSON schema for outputs."""
        return cls.output_type.model_json_schema()

    @classmethod
    def get_config_schema(cls) -> dict:
        """Return JSON schema for config."""
        return cls.config_type.model_json_schema()
