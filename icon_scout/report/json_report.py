# icon_scout/report/json_report.py

"""
Генерация JSON-отчёта о найденной иконке.

Сериализация ResolvedIcon (кандидат + метаданные файла) в файл.
"""
import json
from pathlib import Path
from typing import Optional

from icon_scout.models import ResolvedIcon, TargetSite


def build_record(resolved: ResolvedIcon, site: Optional[TargetSite] = None, saved: Optional[Path] = None) -> dict:
    """Словарь для JSON: откуда взята иконка, её размер и куда сохранена."""
    record = resolved.as_dict()
    if site is not None:
        record = {"url": site.raw_url, "hostname": site.hostname, "slug": site.normalized_slug, **record}
    record["output"] = str(saved) if saved else None
    return record


def render_json(record: dict, output_path: Path | str) -> Path:
    """
    Сохраняет запись record в формате JSON по указанному пути.

    :param record: словарь из build_record
    :param output_path: путь к JSON-файлу
    :return: Path сохранённого файла

    Пример:
    ```python
    from icon_scout.report.json_report import build_record, render_json
    report_path = render_json(build_record(resolved, site), 'reports/icon.json')
    ```
    """
    output = Path(output_path)
    output.parent.mkdir(parents=True, exist_ok=True)

    with output.open('w', encoding='utf-8') as f:
        json.dump(record, f, ensure_ascii=False, indent=2)

    return output
