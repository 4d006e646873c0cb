"""
Kubernetes API access.

Defines the ClusterClient interface the handlers depend on and the concrete
implementation backed by the official ``kubernetes`` Python client. The
dynamic client gives generic list/get access to any resource kind, including
custom resources, without per-kind code.

Methods here are blocking; callers run them in worker threads.
"""

import os
import threading
from abc import ABC, abstractmethod
from typing import Any, Callable, Optional, TypeVar

import urllib3
from kubernetes import client as k8s_client
from kubernetes import config as k8s_config
from kubernetes import dynamic
from kubernetes.client.exceptions import ApiException
from kubernetes.config.config_exception import ConfigException
from kubernetes.dynamic.exceptions import (
    DynamicApiError,
    ResourceNotFoundError,
    ResourceNotUniqueError,
)

from k8s_mcp_server.cluster.errors import BackendUnavailable, NotFound
from k8s_mcp_server.cluster.types import APIResourceDescriptor, ResourceQuery
from k8s_mcp_server.utils.logging import get_logger

logger = get_logger(__name__)

T = TypeVar("T")


class ClusterClient(ABC):
    """
    Read-only capability over the cluster's API.

    Implementations must be safe for concurrent use from several threads,
    and raise NotFound or BackendUnavailable rather than library exceptions.
    """

    @abstractmethod
    def list_resources(
        self, query: ResourceQuery, request_timeout: Optional[float] = None
    ) -> list[dict]:
        """List resources matching the query as plain dicts."""
        pass

    @abstractmethod
    def get_resource(
        self,
        kind: str,
        name: str,
        namespace: Optional[str] = None,
        request_timeout: Optional[float] = None,
    ) -> dict:
        """Get a single resource as a plain dict."""
        pass

    @abstractmethod
    def discover_resources(
        self, request_timeout: Optional[float] = None
    ) -> list[APIResourceDescriptor]:
        """Enumerate the resource kinds served by the API."""
        pass

    @abstractmethod
    def list_events(
        self,
        namespace: Optional[str] = None,
        request_timeout: Optional[float] = None,
    ) -> list[dict]:
        """List core/v1 events, cluster-wide when namespace is None."""
        pass

    def close(self) -> None:
        """Release connections; the default holds none."""
        pass


class KubernetesClusterClient(ClusterClient):
    """
    ClusterClient backed by the kubernetes dynamic client.

    Configuration is loaded lazily on first use, exactly once, so the server
    can start (and answer health checks) before the cluster is reachable.
    """

    def __init__(
        self,
        kubeconfig: Optional[str] = None,
        context: Optional[str] = None,
        in_cluster: Optional[bool] = None,
    ):
        """
        Initialize the client.

        Args:
            kubeconfig: Path to a kubeconfig file (default: $KUBECONFIG or ~/.kube/config)
            context: kubeconfig context to use (default: current context)
            in_cluster: True to use the pod service account, False to require
                a kubeconfig, None to try kubeconfig then service account
        """
        self.kubeconfig = kubeconfig
        self.context = context
        self.in_cluster = in_cluster
        self._lock = threading.Lock()
        # The dynamic client's discovery cache is not safe for concurrent use
        self._discovery_lock = threading.Lock()
        self._api_client: Optional[k8s_client.ApiClient] = None
        self._dynamic: Optional[dynamic.DynamicClient] = None

    def _load_configuration(self) -> k8s_client.Configuration:
        configuration = k8s_client.Configuration()

        if self.in_cluster:
            k8s_config.load_incluster_config(client_configuration=configuration)
            return configuration

        try:
            k8s_config.load_kube_config(
                config_file=self.kubeconfig,
                context=self.context,
                client_configuration=configuration,
            )
        except ConfigException:
            if self.in_cluster is False or not os.environ.get("KUBERNETES_SERVICE_HOST"):
                raise
            logger.info("No usable kubeconfig, using in-cluster service account")
            k8s_config.load_incluster_config(client_configuration=configuration)

        return configuration

    def _ensure_connected(self) -> dynamic.DynamicClient:
        """Build the API and dynamic clients exactly once in a thread-safe way."""
        if self._dynamic is not None:
            return self._dynamic

        with self._lock:
            if self._dynamic is None:
                try:
                    configuration = self._load_configuration()
                    api_client = k8s_client.ApiClient(configuration=configuration)
                    self._dynamic = dynamic.DynamicClient(api_client)
                    self._api_client = api_client
                except (
                    ConfigException,
                    ApiException,
                    DynamicApiError,
                    urllib3.exceptions.HTTPError,
                    OSError,
                ) as e:
                    raise BackendUnavailable(
                        f"cannot connect to the Kubernetes API: {e}"
                    ) from e
                logger.info(f"Connected to Kubernetes API at {configuration.host}")

        return self._dynamic

    def close(self) -> None:
        with self._lock:
            if self._api_client is not None:
                self._api_client.close()
            self._api_client = None
            self._dynamic = None

    def _call(self, description: str, func: Callable[[], T]) -> T:
        """Run an API call, translating library errors."""
        try:
            return func()
        except (NotFound, BackendUnavailable):
            raise
        except ResourceNotFoundError as e:
            raise NotFound(f"{description}: {e}") from e
        except ResourceNotUniqueError as e:
            raise BackendUnavailable(f"{description}: {e}") from e
        except DynamicApiError as e:
            if e.status == 404:
                raise NotFound(f"{description}: not found") from e
            raise BackendUnavailable(f"{description}: {e.summary()}") from e
        except ApiException as e:
            if e.status == 404:
                raise NotFound(f"{description}: not found") from e
            raise BackendUnavailable(f"{description}: {e.status} {e.reason}") from e
        except (urllib3.exceptions.HTTPError, OSError) as e:
            raise BackendUnavailable(f"{description}: {e}") from e

    def _resolve_kind(self, kind: str) -> Any:
        """
        Find the API resource for a kind.

        Accepts the kind ("Deployment") or its plural name ("deployments").
        When several API groups serve the same kind, the core group wins,
        then the group's preferred version.
        """
        resources = self._ensure_connected().resources

        with self._discovery_lock:
            candidates = resources.search(kind=kind)
            if not candidates:
                candidates = resources.search(name=kind.lower())
        candidates = [c for c in candidates if "/" not in (c.name or "")]

        if not candidates:
            raise NotFound(f"resource kind not found: {kind}")

        def rank(resource: Any) -> tuple[int, int]:
            core = 0 if not resource.group else 1
            preferred = 0 if getattr(resource, "preferred", False) else 1
            return core, preferred

        return sorted(candidates, key=rank)[0]

    def list_resources(
        self, query: ResourceQuery, request_timeout: Optional[float] = None
    ) -> list[dict]:
        description = f"list {query.kind}"

        def _list() -> list[dict]:
            resource = self._resolve_kind(query.kind)
            result = resource.get(
                namespace=query.namespace or None,
                label_selector=query.label_selector or None,
                field_selector=query.field_selector or None,
                _request_timeout=request_timeout,
            )
            return result.to_dict().get("items") or []

        return self._call(description, _list)

    def get_resource(
        self,
        kind: str,
        name: str,
        namespace: Optional[str] = None,
        request_timeout: Optional[float] = None,
    ) -> dict:
        location = f"{namespace}/{name}" if namespace else name
        description = f"get {kind} {location}"

        def _get() -> dict:
            resource = self._resolve_kind(kind)
            result = resource.get(
                name=name,
                namespace=namespace or None,
                _request_timeout=request_timeout,
            )
            return result.to_dict()

        return self._call(description, _get)

    def discover_resources(
        self, request_timeout: Optional[float] = None
    ) -> list[APIResourceDescriptor]:
        def _discover() -> list[APIResourceDescriptor]:
            self._ensure_connected()
            api_client = self._api_client

            descriptors = []
            core = k8s_client.CoreV1Api(api_client).get_api_resources(
                _request_timeout=request_timeout
            )
            descriptors.extend(_descriptors_from_list("", "v1", core))

            groups = k8s_client.ApisApi(api_client).get_api_versions(
                _request_timeout=request_timeout
            )
            custom = k8s_client.CustomObjectsApi(api_client)
            for group in groups.groups or []:
                version = group.preferred_version.version
                try:
                    resource_list = custom.get_api_resources(
                        group.name, version, _request_timeout=request_timeout
                    )
                except ApiException as e:
                    # Aggregated APIs (e.g. metrics.k8s.io) can be down on their own
                    logger.warning(
                        f"Skipping API group {group.name}/{version}: {e.status} {e.reason}"
                    )
                    continue
                descriptors.extend(
                    _descriptors_from_list(group.name, version, resource_list)
                )

            return descriptors

        return self._call("discover API resources", _discover)

    def list_events(
        self,
        namespace: Optional[str] = None,
        request_timeout: Optional[float] = None,
    ) -> list[dict]:
        scope = f"namespace {namespace}" if namespace else "all namespaces"

        def _list() -> list[dict]:
            resources = self._ensure_connected().resources
            with self._discovery_lock:
                resource = resources.get(api_version="v1", kind="Event")
            result = resource.get(
                namespace=namespace or None, _request_timeout=request_timeout
            )
            return result.to_dict().get("items") or []

        return self._call(f"list events in {scope}", _list)


def _descriptors_from_list(
    group: str, version: str, resource_list: Any
) -> list[APIResourceDescriptor]:
    """Convert a V1APIResourceList into descriptors, skipping subresources."""
    descriptors = []
    for item in resource_list.resources or []:
        if "/" in item.name:
            continue
        descriptors.append(
            APIResourceDescriptor(
                group=item.group or group,
                version=item.version or version,
                kind=item.kind,
                name=item.name,
                namespaced=bool(item.namespaced),
                verbs=list(item.verbs or []),
                short_names=list(item.short_names or []),
            )
        )
    return descriptors
