from pap.clients.llm_client import LLMClient
from pap.clients.remote_store import RemoteFetch, RemoteStoreClient

__all__ = ["LLMClient", "RemoteFetch", "RemoteStoreClient"]
