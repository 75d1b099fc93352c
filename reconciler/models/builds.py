from pydantic import BaseModel, BeforeValidator, ConfigDict, Field
from typing import Annotated, Any, List, Optional, Union
from urllib.parse import urlparse
from enum import Enum

from reconciler.core.exceptions import ContractViolation, InvalidBuildLink

class BuildStatus(str, Enum):
    """Build, stage and step status reported by Drone"""
    SUCCESS = "success"
    FAILURE = "failure"
    KILLED = "killed"
    ERROR = "error"
    RUNNING = "running"
    SKIPPED = "skipped"
    PENDING = "pending"
    UNKNOWN = "unknown"

    @classmethod
    def _missing_(cls, value: Any):
        return cls.UNKNOWN

class BuildEvent(str, Enum):
    """Event that triggered a build"""
    PULL_REQUEST = "pull_request"
    PUSH = "push"
    TAG = "tag"
    OTHER = "other"

    @classmethod
    def _missing_(cls, value: Any):
        return cls.OTHER

def _lenient(enum_type):
    # Unrecognized strings fall back to the enum's catch-all member
    def coerce(value: Any) -> Any:
        return enum_type(value) if isinstance(value, str) else value
    return BeforeValidator(coerce)

Status = Annotated[BuildStatus, _lenient(BuildStatus)]
Event = Annotated[BuildEvent, _lenient(BuildEvent)]

class DroneModel(BaseModel):
    """Immutable value decoded from a Drone payload"""
    model_config = ConfigDict(frozen=True, populate_by_name=True)

class Step(DroneModel):
    """Step fields shared by both Drone generations"""
    id: int
    step_id: Optional[int] = None
    number: int
    name: str
    status: Status
    errignore: Optional[bool] = None
    exit_code: int
    started: Optional[int] = None
    stopped: Optional[int] = None
    version: Optional[int] = None

    @property
    def is_gen2(self) -> bool:
        return False

    def started_timestamp(self) -> int:
        """Start time of a step that has run"""
        if self.started is None:
            raise ContractViolation(
                f"Step '{self.name}' has no started timestamp",
                {"step": self.name, "status": self.status.value}
            )
        return self.started

    def stopped_timestamp(self) -> int:
        """Stop time of a step that has run"""
        if self.stopped is None:
            raise ContractViolation(
                f"Step '{self.name}' has no stopped timestamp",
                {"step": self.name, "status": self.status.value}
            )
        return self.stopped

    def elapsed_time(self) -> int:
        return self.stopped_timestamp() - self.started_timestamp()

class Gen2Step(Step):
    """Step as reported by Drone 2, which adds the container image"""
    image: str
    depends_on: Optional[List[str]] = None

    @property
    def is_gen2(self) -> bool:
        return True

# Richer variant is tried first, so a payload carrying Drone 2 fields decodes as one
AnyStep = Annotated[Union[Gen2Step, Step], Field(union_mode="left_to_right")]

class Stage(DroneModel):
    """Stage fields shared by both Drone generations"""
    id: int
    repo_id: Optional[int] = None
    build_id: Optional[int] = None
    number: int
    name: str
    status: Status
    errignore: bool
    exit_code: int
    machine: Optional[str] = None
    os: str = ""
    arch: str = ""
    started: int
    stopped: int
    created: int
    updated: int
    version: Optional[int] = None
    on_success: bool = False
    on_failure: bool = False
    steps: List[AnyStep] = Field(default_factory=list)

    @property
    def is_gen2(self) -> bool:
        return False

    def get_step(self, step_name: str) -> Optional[Step]:
        """First step with the given name, in list order"""
        return next((step for step in self.steps if step.name == step_name), None)

    def elapsed_time(self) -> int:
        return self.stopped - self.started

class Gen2Stage(Stage):
    """Stage as reported by Drone 2"""
    kind: str
    stage_type: str = Field(alias="type")
    depends_on: Optional[List[str]] = None

    @property
    def is_gen2(self) -> bool:
        return True

AnyStage = Annotated[Union[Gen2Stage, Stage], Field(union_mode="left_to_right")]

class BuildSummary(DroneModel):
    """Build entry as returned by the build list endpoint"""
    id: int
    repo_id: Optional[int] = None
    trigger: str = ""
    number: int
    status: Status
    event: Event
    action: str = ""
    link: str
    timestamp: Optional[int] = None
    message: str = ""
    previous_commit: str = Field(alias="before")
    commit: str = Field(alias="after")
    ref: str
    source_repo: str = ""
    source: str = ""
    target: str = ""
    author_login: str = ""
    author_name: str = ""
    author_email: str = ""
    author_avatar: str = ""
    sender: str = ""
    # started/finished are estimates while a build is still running
    started: int
    finished: int
    created: int
    updated: int
    version: Optional[int] = None

    def get_pr_url(self) -> str:
        return self.link

    def get_pr_number(self) -> str:
        """Last path segment of the build link, without any '.suffix'"""
        path = urlparse(self.link).path
        if path in ("", "/"):
            raise InvalidBuildLink(self.link, self.number)
        return path.split("/")[-1].split(".")[0]

class BuildDetail(BuildSummary):
    """Full build record including its stages"""
    stages: List[AnyStage]

    def get_stage(self, stage_name: str) -> Optional[Stage]:
        """First stage with the given name, in list order"""
        return next((stage for stage in self.stages if stage.name == stage_name), None)
