import httpx

from tinify_optimizer.bootstrap.components import Components
from tinify_optimizer.components.configuration.configuration_interface import (
    ConfigurationInterface,
)
from tinify_optimizer.components.logger.logger_interface import LoggerInterface
from tinify_optimizer.dependencies.repositories import get_credential_repository
from tinify_optimizer.services.CompletionService.completion_listener import (
    CompletionListener,
)
from tinify_optimizer.services.CompletionService.completion_listener_interface import (
    CompletionListenerInterface,
)
from tinify_optimizer.services.CompletionService.notification_channel import (
    NotificationChannelInterface,
    SseNotificationChannel,
)
from tinify_optimizer.services.InputService.input_service import InputService
from tinify_optimizer.services.InputService.input_service_interface import (
    InputServiceInterface,
)
from tinify_optimizer.services.OptimizeService.optimize_service import OptimizeService
from tinify_optimizer.services.OptimizeService.optimize_service_interface import (
    OptimizeServiceInterface,
)
from tinify_optimizer.services.TinifyApiService.tinify_api_service import (
    DEFAULT_BASE_URL,
    TinifyApiService,
)
from tinify_optimizer.services.TinifyApiService.tinify_api_service_interface import (
    TinifyApiServiceInterface,
)


def _get_base_url(components: Components) -> str:
    configuration = components.get_component(ConfigurationInterface)
    return configuration.get_configuration(
        "TINIFY_BASE_URL", str, default=DEFAULT_BASE_URL
    )


def get_input_service(components: Components) -> InputServiceInterface:
    return InputService(
        http_client=components.get_component(httpx.AsyncClient),
        logger=components.get_component(LoggerInterface).get_logger("InputService"),
    )


def get_tinify_api_service(components: Components) -> TinifyApiServiceInterface:
    return TinifyApiService(
        http_client=components.get_component(httpx.AsyncClient),
        logger=components.get_component(LoggerInterface).get_logger("TinifyApiService"),
        base_url=_get_base_url(components),
    )


def get_completion_listener(components: Components) -> CompletionListenerInterface:
    http_client = components.get_component(httpx.AsyncClient)
    base_url = _get_base_url(components)
    logger = components.get_component(LoggerInterface).get_logger("CompletionListener")

    def open_channel(job_id: str) -> NotificationChannelInterface:
        return SseNotificationChannel(
            http_client=http_client,
            base_url=base_url,
            job_id=job_id,
            logger=logger,
        )

    return CompletionListener(channel_factory=open_channel, logger=logger)


def get_optimize_service(components: Components) -> OptimizeServiceInterface:
    configuration = components.get_component(ConfigurationInterface)
    timeout_ms = configuration.get_configuration(
        "TINIFY_TIMEOUT_MS",
        int,
        default=CompletionListenerInterface.DEFAULT_TIMEOUT_MS,
    )

    return OptimizeService(
        credential_repository=get_credential_repository(components),
        input_service=get_input_service(components),
        api_service=get_tinify_api_service(components),
        completion_listener=get_completion_listener(components),
        logger=components.get_component(LoggerInterface).get_logger("OptimizeService"),
        default_timeout_ms=timeout_ms,
    )
