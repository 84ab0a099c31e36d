# docs_mirror/report.py

"""
Генерация JSON-отчёта о запуске docs-mirror.

Сериализация объекта MirrorReport в файл.
"""
import json
from pathlib import Path

from docs_mirror.crawler.mirror import MirrorReport


def render_json(report: MirrorReport, output_path: Path | str, pretty: bool = True) -> Path:
    """
    Сохраняет отчёт report в формате JSON по указанному пути.

    :param report: объект MirrorReport с итогами запуска
    :param output_path: путь к JSON-файлу
    :param pretty: отступ 2 пробела
    :return: Path сохранённого файла
    """
    output = Path(output_path)
    output.parent.mkdir(parents=True, exist_ok=True)

    with output.open('w', encoding='utf-8') as f:
        json.dump(report.to_dict(), f, ensure_ascii=False, indent=2 if pretty else None)

    return output


__all__ = ["render_json"]
