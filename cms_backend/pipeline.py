"""Request pre-processing chain.

The pipeline is an ordered, immutable tuple of links assembled once at
startup. `RequestPipeline.run` walks it explicitly: a link returning a
`PipelineResponse` short-circuits the request, returning `None` hands the
request to the next link. Falling off the end means "dispatch normally".
"""
from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, Mapping, Optional, Protocol, Tuple

from .logger import AppLogger


@dataclass
class PipelineRequest:
    method: str
    path: str
    body: Mapping[str, Any] = field(default_factory=dict)
    headers: Mapping[str, str] = field(default_factory=dict)
    # annotations added by links for later handlers
    marks: Dict[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class PipelineResponse:
    status: int
    body: Dict[str, Any]


class PipelineLink(Protocol):
    def process(self, request: PipelineRequest) -> Optional[PipelineResponse]:
        ...


class LoggingLink:
    def __init__(self, logger: Optional[AppLogger] = None):
        self.logger = logger or AppLogger(__name__)

    def process(self, request: PipelineRequest) -> Optional[PipelineResponse]:
        self.logger.info(f'{request.method} {request.path}')
        return None


class AuthMarkLink:
    """Tags the request as public or protected; never rejects anything.

    Token verification and role checks happen in `security.require_auth`.
    """

    PUBLIC_PREFIXES = ('/api/auth', '/api/health')

    def process(self, request: PipelineRequest) -> Optional[PipelineResponse]:
        public = request.path.startswith(self.PUBLIC_PREFIXES) or (
            request.method == 'GET' and request.path.startswith('/api/posts'))
        request.marks['auth_scope'] = 'public' if public else 'protected'
        return None


class ValidationLink:
    POST_COLLECTION = '/api/posts'

    def process(self, request: PipelineRequest) -> Optional[PipelineResponse]:
        if request.method == 'POST' and request.path.rstrip('/') == self.POST_COLLECTION:
            if not request.body.get('title') or not request.body.get('content'):
                return PipelineResponse(400, {'message': 'Title and content are required'})
        return None


class RequestPipeline:
    def __init__(self, links: Iterable[PipelineLink]):
        self._links: Tuple[PipelineLink, ...] = tuple(links)

    @property
    def links(self) -> Tuple[PipelineLink, ...]:
        return self._links

    def run(self, request: PipelineRequest) -> Optional[PipelineResponse]:
        for link in self._links:
            response = link.process(request)
            if response is not None:
                return response
        return None


def build_default_pipeline(logger: Optional[AppLogger] = None) -> RequestPipeline:
    return RequestPipeline([LoggingLink(logger), AuthMarkLink(), ValidationLink()])
