#!/usr/bin/env python3
# -*- coding: utf-8 -*-

"""
import_grades.py

Le uma planilha de notas (CSV ou XLSX) e envia para POST /grades/import.

Colunas esperadas (cabecalho na linha 1, nomes flexiveis):
  Matrícula | Aluno | 1º Bimestre | 2º Bimestre | 3º Bimestre | 4º Bimestre

Uso:
  python scripts/import_grades.py notas_9A.xlsx --class-id 3 --subject-id 7 --year 2024

ENV obrigatorias:
  API_BASE_URL=http://127.0.0.1:8000

ENV opcionais:
  ACCESS_TOKEN=...        (se definido, evita login automatico)
  LOGIN_USERNAME=admin
  SHEET_NAME=             (aba do XLSX; padrao = primeira)
  BATCH_SIZE=50
  REQUEST_TIMEOUT=60
"""

from __future__ import annotations

import argparse
import json
import os
from pathlib import Path
from typing import Any, Dict, List, Sequence

import openpyxl
import requests
from dotenv import load_dotenv

from escola.services.csv_io import parse_grade_table, read_csv_table


def die(msg: str, code: int = 1) -> None:
    print(f"[ERRO] {msg}")
    raise SystemExit(code)


def env_required(name: str) -> str:
    v = os.getenv(name)
    if not v:
        die(f"Variável de ambiente obrigatória não definida: {name}")
    return v


def read_table(path: Path, sheet_name: str | None) -> List[Sequence[Any]]:
    if path.suffix.lower() in (".xlsx", ".xlsm"):
        wb = openpyxl.load_workbook(path, data_only=True, read_only=True)
        if sheet_name and sheet_name not in wb.sheetnames:
            die(f"Aba '{sheet_name}' não encontrada. Abas: {wb.sheetnames}")
        ws = wb[sheet_name] if sheet_name else wb.worksheets[0]
        rows = [list(r) for r in ws.iter_rows(values_only=True)]
        return [r for r in rows if any(c not in (None, "") for c in r)]

    return read_csv_table(path.read_text(encoding="utf-8-sig"))


def api_login_and_get_token(api_base_url: str, username: str, timeout: int) -> str:
    url = api_base_url.rstrip("/") + "/auth/login"
    resp = requests.post(url, json={"username": username}, timeout=timeout)
    if resp.status_code != 200:
        die(f"Falha no login em {url}. Status {resp.status_code}. Body: {resp.text}")

    token = resp.json().get("access_token")
    if not token:
        die(f"Login retornou sucesso mas sem access_token. Body: {resp.text}")
    return token


def post_import(
    api_base_url: str,
    token: str,
    payload: Dict[str, Any],
    timeout: int,
) -> requests.Response:
    url = api_base_url.rstrip("/") + "/grades/import"
    headers = {"Authorization": f"Bearer {token}", "accept": "application/json"}
    return requests.post(url, json=payload, headers=headers, timeout=timeout)


def chunks(lst: List[Dict[str, Any]], size: int) -> List[List[Dict[str, Any]]]:
    return [lst[i:i + size] for i in range(0, len(lst), size)]


def main() -> None:
    load_dotenv()

    parser = argparse.ArgumentParser(description="Importa notas bimestrais para a API")
    parser.add_argument("path", type=Path, help="Arquivo .csv ou .xlsx")
    parser.add_argument("--class-id", type=int, required=True)
    parser.add_argument("--subject-id", type=int, required=True)
    parser.add_argument("--year", type=int, required=True, help="Ano letivo")
    parser.add_argument("--dry-run", action="store_true", help="So mostra o que seria enviado")
    args = parser.parse_args()

    if not args.path.exists():
        die(f"Arquivo não encontrado: {args.path}")

    request_timeout = int(os.getenv("REQUEST_TIMEOUT", "60"))
    batch_size = int(os.getenv("BATCH_SIZE", "50"))

    try:
        rows = parse_grade_table(read_table(args.path, os.getenv("SHEET_NAME") or None))
    except ValueError as exc:
        die(f"Planilha inválida: {exc}")

    print(f"Linhas lidas: {len(rows)}")
    print(json.dumps(rows[:3], ensure_ascii=False, indent=2))
    if args.dry_run or not rows:
        return

    api_base_url = env_required("API_BASE_URL")
    token = os.getenv("ACCESS_TOKEN")
    if not token:
        token = api_login_and_get_token(api_base_url, os.getenv("LOGIN_USERNAME") or "admin", request_timeout)
        print("OK login automático.")

    written = 0
    unknown: List[str] = []
    batches = chunks(rows, batch_size)
    for i, batch in enumerate(batches, start=1):
        print(f"-> POST lote {i}/{len(batches)} ({len(batch)} alunos)")
        payload = {
            "class_id": args.class_id,
            "subject_id": args.subject_id,
            "academic_year": args.year,
            "rows": batch,
        }
        resp = post_import(api_base_url, token, payload, request_timeout)
        if resp.status_code != 200:
            print(resp.text)
            die("API retornou erro no lote. Veja o output acima.", 2)

        body = resp.json()
        written += body["written"]
        unknown.extend(body["unknown_registrations"])

    print(f"Notas gravadas: {written}")
    if unknown:
        print(f"Matrículas fora da turma (ignoradas): {', '.join(unknown)}")


if __name__ == "__main__":
    main()
