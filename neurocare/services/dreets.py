"""Diploma verification requests to the regional DREETS.

The regulator is reached by mail only; its answer comes back out of band
and is recorded by an admin (``diploma.mark_regulator_responded``).
"""
from flask import current_app, render_template

from .mail import send_mail

DEFAULT_DREETS_EMAIL = 'contact@neuro-care.fr'

DREETS_EMAILS = {
    'Île-de-France': 'drieets-idf@drieets.gouv.fr',
    'Auvergne-Rhône-Alpes': 'dreets-ara@dreets.gouv.fr',
    "Provence-Alpes-Côte d'Azur": 'dreets-paca@dreets.gouv.fr',
    'Nouvelle-Aquitaine': 'dreets-na@dreets.gouv.fr',
    'Occitanie': 'dreets-occitanie@dreets.gouv.fr',
    'Hauts-de-France': 'dreets-hdf@dreets.gouv.fr',
    'Grand Est': 'dreets-ge@dreets.gouv.fr',
    'Bretagne': 'dreets-bretagne@dreets.gouv.fr',
    'Pays de la Loire': 'dreets-pdl@dreets.gouv.fr',
    'Normandie': 'dreets-normandie@dreets.gouv.fr',
    'Bourgogne-Franche-Comté': 'dreets-bfc@dreets.gouv.fr',
    'Centre-Val de Loire': 'dreets-cvl@dreets.gouv.fr',
    'Corse': 'dreets-corse@dreets.gouv.fr',
    # outre-mer (DEETS)
    'Guadeloupe': 'deets-guadeloupe@deets.gouv.fr',
    'Guyane': 'deets-guyane@deets.gouv.fr',
    'La Réunion': 'deets-reunion@deets.gouv.fr',
    'Martinique': 'deets-martinique@deets.gouv.fr',
    'Mayotte': 'deets-mayotte@deets.gouv.fr',
}

REGIONS = sorted(DREETS_EMAILS)


def resolve_recipient(region):
    """Regional address, or the platform address for unknown regions.

    With DREETS_REDIRECT_TO_ADMIN set (development), everything goes to ADMIN_EMAIL.
    """
    address = DREETS_EMAILS.get(region or '', DEFAULT_DREETS_EMAIL)
    if current_app.config.get('DREETS_REDIRECT_TO_ADMIN'):
        current_app.logger.info('DREETS mail for %s (%s) redirected to admin', address, region)
        return current_app.config.get('ADMIN_EMAIL') or DEFAULT_DREETS_EMAIL
    return address


def build_request_mail(educator, diploma_url):
    """Return (subject, html) for the verification request of ``educator``."""
    ocr_report = educator.diploma_ocr_analysis
    subject = f"Demande de vérification de diplôme - {educator.last_name} {educator.first_name}"
    html = render_template(
        'emails/dreets_request.html',
        educator=educator,
        email=educator.user.email if educator.user else '',
        diploma_url=diploma_url,
        ocr_report=ocr_report,
        app_url=current_app.config.get('APP_URL'),
        contact_email=current_app.config.get('ADMIN_EMAIL') or DEFAULT_DREETS_EMAIL,
    )
    return subject, html


def send_verification_request(educator, diploma_url):
    """Mail the regulator; returns {"success", "message", "sent_to", "provider_message_id"}.

    Provider errors are reported in the result, never raised.
    """
    to_email = resolve_recipient(educator.region)
    subject, html = build_request_mail(educator, diploma_url)
    try:
        _, message_id = send_mail(to_email, subject, html, cc=current_app.config.get('ADMIN_EMAIL'))
    except Exception:
        current_app.logger.exception('DREETS request mail failed for educator %s', educator.id)
        return {
            'success': False,
            'message': "Erreur lors de l'envoi de la demande à la DREETS",
            'sent_to': to_email,
            'subject': subject,
            'provider_message_id': None,
        }
    current_app.logger.info('DREETS request for educator %s sent to %s', educator.id, to_email)
    return {
        'success': True,
        'message': 'Demande de vérification envoyée à la DREETS',
        'sent_to': to_email,
        'subject': subject,
        'provider_message_id': message_id,
    }
