from __future__ import annotations

import logging

from storefront.application.container import StorefrontContainer, build_container
from storefront.config import get_app_paths, load_settings
from storefront.logging_config import setup_logging

log = logging.getLogger(__name__)


def bootstrap() -> StorefrontContainer:
    settings = load_settings()
    paths = get_app_paths(settings.app_name)
    setup_logging(paths.logs_dir, level=logging.INFO)

    container = build_container(settings)
    container.session.start()
    log.info(
        "client_started api=%s authenticated=%s",
        settings.api_base_url,
        container.session.is_authenticated,
    )
    return container

