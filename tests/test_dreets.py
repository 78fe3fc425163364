from neurocare.services import dreets

from factories import make_educator


def test_known_region_uses_its_address(ctx):
    assert dreets.resolve_recipient("Auvergne-Rhône-Alpes") == "dreets-ara@dreets.gouv.fr"
    assert dreets.resolve_recipient("La Réunion") == "deets-reunion@deets.gouv.fr"


def test_unknown_region_falls_back_to_platform_address(ctx):
    assert dreets.resolve_recipient("Atlantide") == dreets.DEFAULT_DREETS_EMAIL
    assert dreets.resolve_recipient(None) == dreets.DEFAULT_DREETS_EMAIL


def test_development_redirects_to_admin(ctx):
    ctx.config["DREETS_REDIRECT_TO_ADMIN"] = True
    ctx.config["ADMIN_EMAIL"] = "ops@example.com"
    assert dreets.resolve_recipient("Bretagne") == "ops@example.com"


def test_request_mail_lists_educator_and_escapes_input(ctx):
    educator = make_educator(first_name="<b>Léa</b>", last_name="Durand", phone="0600000000",
                             diploma_number="20194455", region="Bretagne")
    subject, html = dreets.build_request_mail(educator, "https://files.example/d?sig=1&x=2")
    assert subject == "Demande de vérification de diplôme - Durand <b>Léa</b>"
    assert "&lt;b&gt;Léa&lt;/b&gt;" in html
    assert "20194455" in html
    assert "https://files.example/d?sig=1&amp;x=2" in html
    assert "edu@example.com" in html


def test_send_reports_provider_errors(ctx, monkeypatch):
    def fail(*args, **kwargs):
        raise RuntimeError("SendGrid 500")
    monkeypatch.setattr(dreets, "send_mail", fail)
    educator = make_educator(region="Corse")
    result = dreets.send_verification_request(educator, "https://x")
    assert result["success"] is False
    assert result["sent_to"] == "dreets-corse@dreets.gouv.fr"
