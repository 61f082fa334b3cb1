# model/workflow.py
from datetime import datetime
from typing import List
from pydantic import AliasChoices, BaseModel, Field
from util.enums import WipeScope, WipeStage


class WipeRequest(BaseModel):
    # Publishers use either "tenant" or the older "organization" key.
    tenant: str = Field(
        min_length=1, validation_alias=AliasChoices("tenant", "organization")
    )
    scope: WipeScope = WipeScope.ALL
    prefixes: List[str] | None = None

    @property
    def wipes_documents(self) -> bool:
        return self.scope in (WipeScope.ALL, WipeScope.DOCUMENTS)

    @property
    def wipes_objects(self) -> bool:
        return self.scope in (WipeScope.ALL, WipeScope.OBJECTS)


class WipeWorkflow(BaseModel):
    tenant: str
    stage: WipeStage = WipeStage.RECEIVED
    completedStages: List[WipeStage] = Field(default_factory=list)
    documentsDeleted: int = 0
    prefixes: List[str] = Field(default_factory=list)
    error: str | None = None
    failedStage: WipeStage | None = None
    startedAt: datetime
    updatedAt: datetime
