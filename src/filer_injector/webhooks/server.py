"""
HTTPS server for the mutating admission webhook.
"""

import logging
import ssl

from aiohttp import web

from filer_injector.constants import EXPECTED_CONTENT_TYPE
from filer_injector.errors import AdmissionDecodeError, ConfigurationError
from filer_injector.models.admission import AdmissionResponse
from filer_injector.models.sidecar import SidecarTemplate
from filer_injector.utils.http_server import HTTPServer
from filer_injector.webhooks.codec import AdmissionCodec
from filer_injector.webhooks.pod import CredentialLister, mutate_pod

logger = logging.getLogger(__name__)


def create_ssl_context(cert_file: str, key_file: str) -> ssl.SSLContext:
    """
    Build the server TLS context from a certificate and key pair.

    Raises:
        ConfigurationError: If the pair cannot be loaded
    """
    context = ssl.create_default_context(ssl.Purpose.CLIENT_AUTH)
    try:
        context.load_cert_chain(certfile=cert_file, keyfile=key_file)
    except (OSError, ssl.SSLError) as e:
        raise ConfigurationError(
            f"Failed to load key pair {cert_file}, {key_file}: {e}",
            user_action="Mount a valid TLS certificate and key for the webhook",
            cause=e,
        ) from e
    return context


class WebhookServer(HTTPServer):
    """Answers AdmissionReview requests on /mutate."""

    name = "Admission webhook"

    def __init__(
        self,
        template: SidecarTemplate,
        codec: AdmissionCodec,
        list_credentials: CredentialLister,
        host: str = "0.0.0.0",
        port: int = 8443,
        ssl_context: ssl.SSLContext | None = None,
    ):
        """
        Initialize webhook server.

        Args:
            template: Sidecar template loaded at startup
            codec: AdmissionReview codec
            list_credentials: Callable listing filer credentials of a namespace
            host: Host interface to bind to
            port: Port to serve the webhook on
            ssl_context: TLS context; plain HTTP when None
        """
        self.template = template
        self.codec = codec
        self.list_credentials = list_credentials
        super().__init__(host=host, port=port, ssl_context=ssl_context)

    def add_routes(self, router: web.UrlDispatcher) -> None:
        router.add_post("/mutate", self._mutate_handler)
        router.add_get("/healthz", self._healthz_handler)

    async def _mutate_handler(self, request: web.Request) -> web.Response:
        body = await request.read()
        if not body:
            logger.warning("empty body")
            return web.Response(text="empty body", status=400)

        if request.content_type != EXPECTED_CONTENT_TYPE:
            logger.warning(
                f"Content-Type={request.content_type}, expect {EXPECTED_CONTENT_TYPE}"
            )
            return web.Response(
                text=f"invalid Content-Type, expect `{EXPECTED_CONTENT_TYPE}`",
                status=415,
            )

        try:
            review = self.codec.decode_review(body)
        except AdmissionDecodeError as e:
            logger.warning(str(e))
            response = AdmissionResponse.deny(str(e))
        else:
            response = await mutate_pod(
                review.request, self.template, self.codec, self.list_credentials
            )

        return web.Response(
            body=self.codec.encode_response(response),
            content_type=EXPECTED_CONTENT_TYPE,
        )

    async def _healthz_handler(self, request: web.Request) -> web.Response:
        return web.Response(text="ok")


def build_webhook_server(
    template: SidecarTemplate,
    list_credentials: CredentialLister,
    host: str,
    port: int,
    cert_file: str,
    key_file: str,
) -> WebhookServer:
    """Assemble a TLS webhook server with its own codec."""
    return WebhookServer(
        template=template,
        codec=AdmissionCodec(),
        list_credentials=list_credentials,
        host=host,
        port=port,
        ssl_context=create_ssl_context(cert_file, key_file),
    )
