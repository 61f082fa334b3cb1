class InternalURIs:
    API = "/api"
    V1 = API + "/v1"
    SUBSCRIBE = V1 + "/management/subscribe"
    DOCUMENTS = V1 + "/documents"
    DOCUMENT = DOCUMENTS + "/{doc_id}"
    ASSETS = V1 + "/assets"
    ASSET = ASSETS + "/{key:path}"


class BusHeaders:
    MESSAGE_TYPE = "x-amz-sns-message-type"
    TOPIC_ARN = "x-amz-sns-topic-arn"


class WorkspaceHeaders:
    WORKSPACE = "x-workspace"
