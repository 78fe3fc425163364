"""Diploma OCR.

The text extraction itself is delegated to the OpenAI Responses HTTP API
(called directly with ``requests``). Everything after extraction, the
keyword validation and the number/date extraction, runs locally so the
advisory result is the same whatever produced the text.

``analyze_diploma`` never raises: a failing collaborator yields
``success=False`` with a warning, and the submission carries on without OCR.
"""
import base64
import json
import random
import re
import time
from typing import Any, Dict, Optional

import requests
from flask import current_app

from .errors import DependencyError

REQUIRED_KEYWORDS = {
    'diploma_types': [
        'moniteur-éducateur',
        'moniteur éducateur',
        'moniteur educateur',
        'éducateur spécialisé',
        'educateur spécialisé',
        'éducateur specialise',
        'educateur specialise',
        'deme',
        'dees',
    ],
    'authorities': [
        'dreets',
        'drjscs',
        'ministère',
        'ministere',
        'république française',
        'republique francaise',
        'état',
        'etat',
    ],
    'diploma_related': [
        'diplôme',
        'diplome',
        'certificat',
        'attestation',
    ],
}

_NUMBER_PATTERNS = [
    re.compile(r'n[°\s]*(\d{4,})', re.I),
    re.compile(r'numéro[:\s]*(\d{4,})', re.I),
    re.compile(r'numero[:\s]*(\d{4,})', re.I),
    re.compile(r'diplôme[:\s]*n[°\s]*(\d{4,})', re.I),
]

_DATE_PATTERNS = [
    re.compile(r'(\d{1,2})[/\s-](\d{1,2})[/\s-](\d{4})'),
    re.compile(
        r'(\d{1,2})\s+(janvier|février|mars|avril|mai|juin|juillet|août|septembre|octobre|novembre|décembre)\s+(\d{4})',
        re.I,
    ),
]

OPENAI_RESPONSES_URL = 'https://api.openai.com/v1/responses'

_PROMPT = (
    "Tu es un service d'OCR. Transcris fidèlement tout le texte visible de ce diplôme, "
    "sans le résumer ni le corriger. Réponds uniquement avec un objet JSON de la forme "
    '{"text": "<texte extrait>", "confidence": <nombre entre 0 et 100>}.'
)


def validate_diploma_text(text: str) -> Dict[str, Any]:
    """Check extracted text for the keyword groups of a ME/ES diploma.

    The text counts as a plausible diploma when it names a diploma type and
    carries a diploma keyword; the issuing authority only adds a warning.
    """
    text = (text or '').lower()
    matched = []
    found = {}
    for group, keywords in REQUIRED_KEYWORDS.items():
        hit = next((k for k in keywords if k in text), None)
        if hit:
            matched.append(hit)
        found[group] = hit is not None

    warnings = []
    if not found['diploma_types']:
        warnings.append('Type de diplôme (ME ou ES) non détecté')
    if not found['authorities']:
        warnings.append('Autorité émettrice (DREETS, Ministère) non détectée')
    if not found['diploma_related']:
        warnings.append('Mot-clé "diplôme" ou "certificat" non détecté')

    return {
        'has_diploma_type': found['diploma_types'],
        'has_authority': found['authorities'],
        'has_diploma_keyword': found['diploma_related'],
        'is_valid': found['diploma_types'] and found['diploma_related'],
        'matched_keywords': matched,
        'warnings': warnings,
    }


def extract_diploma_number(text: str) -> Optional[str]:
    for pattern in _NUMBER_PATTERNS:
        m = pattern.search(text or '')
        if m:
            return m.group(1)
    return None


def extract_delivery_date(text: str) -> Optional[str]:
    for pattern in _DATE_PATTERNS:
        m = pattern.search(text or '')
        if m:
            return m.group(0)
    return None


def failed_result(warning='Erreur lors de l\'analyse OCR') -> Dict[str, Any]:
    return {
        'success': False,
        'text': '',
        'confidence': 0.0,
        'validation': {
            'has_diploma_type': False,
            'has_authority': False,
            'has_diploma_keyword': False,
            'is_valid': False,
            'matched_keywords': [],
            'warnings': [warning],
        },
    }


def generate_analysis_report(result: Dict[str, Any]) -> str:
    """Markdown summary of an OCR result, attached to the regulator mail."""
    lines = ['## Analyse automatique du diplôme', '']
    if not result.get('success'):
        lines.append("❌ **Erreur:** Impossible d'analyser le document")
        lines.append('Vérification manuelle requise.')
        return '\n'.join(lines) + '\n'

    v = result['validation']
    lines.append(f"**Confiance OCR:** {float(result.get('confidence') or 0):.1f}%")
    lines.append('')
    if v['is_valid']:
        lines.append('✅ **Résultat:** Diplôme valide (pré-vérification)')
    else:
        lines.append('⚠️ **Résultat:** Vérification manuelle requise')
    lines.append('')
    lines.append('**Éléments détectés:**')
    lines.append(f"- Type de diplôme (ME/ES): {'✓' if v['has_diploma_type'] else '✗'}")
    lines.append(f"- Autorité émettrice: {'✓' if v['has_authority'] else '✗'}")
    lines.append(f"- Mot-clé \"diplôme\": {'✓' if v['has_diploma_keyword'] else '✗'}")
    lines.append('')
    if v['matched_keywords']:
        lines.append(f"**Mots-clés trouvés:** {', '.join(v['matched_keywords'])}")
        lines.append('')
    if v['warnings']:
        lines.append('**Avertissements:**')
        lines.extend(f'- {w}' for w in v['warnings'])

    number = extract_diploma_number(result.get('text', ''))
    date = extract_delivery_date(result.get('text', ''))
    if number or date:
        lines.append('')
        lines.append('**Informations extraites:**')
        if number:
            lines.append(f'- Numéro de diplôme: {number}')
        if date:
            lines.append(f'- Date de délivrance: {date}')
    return '\n'.join(lines) + '\n'


class OcrClient:
    """Text extraction through the OpenAI Responses API."""

    def __init__(self, api_key, model='gpt-4o-mini', timeout=60, max_attempts=4):
        self.api_key = api_key
        self.model = model
        self.timeout = timeout
        self.max_attempts = max_attempts

    @classmethod
    def from_config(cls, config):
        return cls(
            config.get('OPENAI_API_KEY'),
            model=config.get('OCR_MODEL', 'gpt-4o-mini'),
            timeout=config.get('OCR_TIMEOUT', 60),
        )

    def _content_part(self, data: bytes, filename: str, mimetype: str):
        encoded = base64.b64encode(data).decode('ascii')
        if mimetype == 'application/pdf':
            return {
                'type': 'input_file',
                'filename': filename or 'diplome.pdf',
                'file_data': f'data:application/pdf;base64,{encoded}',
            }
        return {'type': 'input_image', 'image_url': f'data:{mimetype};base64,{encoded}'}

    def analyze_diploma(self, data: bytes, filename: str, mimetype: str) -> Dict[str, Any]:
        """Return ``{"text", "confidence"}`` or raise DependencyError."""
        if not self.api_key:
            raise DependencyError('ocr', 'OPENAI_API_KEY is not configured')

        headers = {'Authorization': f'Bearer {self.api_key}', 'Content-Type': 'application/json'}
        body = {
            'model': self.model,
            'input': [{
                'role': 'user',
                'content': [
                    {'type': 'input_text', 'text': _PROMPT},
                    self._content_part(data, filename, mimetype),
                ],
            }],
            'max_output_tokens': 2000,
            'temperature': 0,
        }

        # retry on rate limits and 5xx, honouring Retry-After
        backoff = 1.0
        jr = None
        for attempt in range(1, self.max_attempts + 1):
            try:
                r = requests.post(OPENAI_RESPONSES_URL, headers=headers, json=body, timeout=self.timeout)
            except requests.RequestException as e:
                if attempt == self.max_attempts:
                    raise DependencyError('ocr', 'request failed', cause=e)
                time.sleep(backoff + random.uniform(0, 0.5))
                backoff *= 2
                continue
            if r.status_code == 429 or r.status_code >= 500:
                if attempt == self.max_attempts:
                    raise DependencyError('ocr', f'HTTP {r.status_code}')
                retry_after = r.headers.get('Retry-After')
                wait = float(retry_after) if retry_after and retry_after.isdigit() else backoff
                current_app.logger.warning('OCR HTTP %s, retrying in %.1fs (attempt %s)', r.status_code, wait, attempt)
                time.sleep(wait + random.uniform(0, 0.5))
                backoff *= 2
                continue
            if r.status_code >= 400:
                raise DependencyError('ocr', f'HTTP {r.status_code}: {r.text[:200]}')
            try:
                jr = r.json()
            except ValueError as e:
                raise DependencyError('ocr', 'invalid JSON body', cause=e)
            if not isinstance(jr, dict):
                raise DependencyError('ocr', 'invalid JSON body')
            break

        return self._parse(jr or {})

    @staticmethod
    def _output_text(jr):
        if jr.get('output_text'):
            return jr['output_text']
        parts = []
        for item in jr.get('output', []) or []:
            for c in item.get('content', []) or []:
                if c.get('type') in ('output_text', 'text') and c.get('text'):
                    parts.append(c['text'])
        return ''.join(parts)

    def _parse(self, jr):
        text = self._output_text(jr)
        m = re.search(r'\{.*\}', text, re.S)
        if not m:
            raise DependencyError('ocr', 'response did not contain JSON')
        try:
            payload = json.loads(m.group(0))
        except ValueError as e:
            raise DependencyError('ocr', 'response JSON could not be parsed', cause=e)
        try:
            confidence = float(payload.get('confidence') or 0)
        except (TypeError, ValueError):
            confidence = 0.0
        return {
            'text': str(payload.get('text') or ''),
            'confidence': max(0.0, min(100.0, confidence)),
        }


def analyze_diploma(data: bytes, filename: str, mimetype: str, client: Optional[OcrClient] = None) -> Dict[str, Any]:
    """Run OCR and keyword validation; returns an OCR result dict, never raises."""
    client = client or OcrClient.from_config(current_app.config)
    try:
        extracted = client.analyze_diploma(data, filename, mimetype)
    except DependencyError as e:
        current_app.logger.warning('Diploma OCR failed: %s', e.message)
        return failed_result()

    text = extracted['text'].lower()
    return {
        'success': True,
        'text': text,
        'confidence': extracted['confidence'],
        'validation': validate_diploma_text(text),
    }
