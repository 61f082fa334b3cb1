# util/types.py
from typing import Dict, List, Literal, TypedDict


# Flow: shapes of the boto3 payloads we build by hand.
RuleStatus = Literal["Enabled", "Disabled"]


class S3LifecycleRule(TypedDict):
    ID: str
    Filter: Dict[str, str]
    Expiration: Dict[str, int]
    Status: RuleStatus


class S3LifecycleConfiguration(TypedDict):
    Rules: List[S3LifecycleRule]


class UploadExtraArgs(TypedDict, total=False):
    ContentType: str
    ACL: str
    CacheControl: str
    Metadata: Dict[str, str]
