"""
services/mailer.py

SMTP 메일 발송 서비스.

회원 환영 메일, 회원권 만료 알림, 뉴스레터 발송에 사용한다.

설계 원칙:
- best-effort: 발송 실패는 로그만 남기고 False 반환 (예외 전파 없음)
- SMTP_HOST 미설정 시 발송을 건너뜀 (로컬 / 테스트 환경)
- 재시도 큐 없음

관련 파일:
- app.core.config              : SMTP_* 설정
- app.services.members         : 환영 메일
- app.services.notifications   : 예약 알림 발송
- app.services.newsletters     : 뉴스레터 발송

"""

import logging
import smtplib
from email.message import EmailMessage

from app.core.config import settings

logger = logging.getLogger(__name__)


def send_email(*, to: str, subject: str, text: str, html: str | None = None) -> bool:
    if not settings.SMTP_HOST:
        logger.info("SMTP_HOST not configured, skipping email to %s (%s)", to, subject)
        return False

    msg = EmailMessage()
    msg["Subject"] = subject
    msg["From"] = settings.SMTP_FROM or settings.SMTP_USER or "no-reply@localhost"
    msg["To"] = to
    msg.set_content(text)
    if html:
        msg.add_alternative(html, subtype="html")

    try:
        with smtplib.SMTP(settings.SMTP_HOST, settings.SMTP_PORT, timeout=settings.SMTP_TIMEOUT) as server:
            server.starttls()
            if settings.SMTP_USER and settings.SMTP_PASSWORD:
                server.login(settings.SMTP_USER, settings.SMTP_PASSWORD)
            server.send_message(msg)
    except (smtplib.SMTPException, OSError):
        logger.exception("Email send failed to=%s subject=%s", to, subject)
        return False

    logger.info("Email sent to=%s subject=%s", to, subject)
    return True
