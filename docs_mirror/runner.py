# === FILE: docs_mirror/runner.py ===
"""
Модуль-обёртка для функции запуска зеркалирования.
"""
from docs_mirror.config import MirrorConfig
from docs_mirror.crawler.mirror import DocsMirror, MirrorReport


async def start_mirror(cfg: MirrorConfig) -> MirrorReport:
    """
    Запускает DocsMirror в контексте и возвращает итоговый отчёт.

    Parameters
    ----------
    cfg : MirrorConfig
        Конфигурация зеркалирования.

    Returns
    -------
    MirrorReport
        Счётчики обхода и загрузки.

    Raises
    ------
    RootSitemapError
        Если корневой sitemap не удалось скачать или разобрать.
    """
    async with DocsMirror(cfg) as mirror:
        report = await mirror.run()
    return report

__all__ = ["start_mirror"]
