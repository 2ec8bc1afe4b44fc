import base64
import logging
from typing import Optional

import requests
from requests.adapters import HTTPAdapter
from urllib3.util.retry import Retry

import config

logger = logging.getLogger(__name__)


class ExamPortalClient:
    """
    One cookie-carrying session against the exam portal. Each user gets their
    own client so the CAPTCHA they solved matches the session that logs in.
    """

    def __init__(self, base_url: str = config.PORTAL_BASE_URL, timeout: int = config.PORTAL_TIMEOUT):
        self.base_url = base_url.rstrip("/")
        self.session = requests.Session()

        retry_strategy = Retry(
            total=3,
            backoff_factor=1,
            status_forcelist=[429, 500, 502, 503, 504],
            allowed_methods=["HEAD", "GET", "OPTIONS"]
        )
        adapter = HTTPAdapter(max_retries=retry_strategy)
        self.session.mount("https://", adapter)
        self.session.mount("http://", adapter)

        self.session.headers.update({
            "User-Agent": "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36",
            "Accept": "text/html,application/xhtml+xml,application/xml;q=0.9,image/avif,image/webp,*/*;q=0.8",
            "Accept-Language": "en-US,en;q=0.9",
            "Referer": self.login_url,
        })
        self.timeout = timeout

    @property
    def login_url(self) -> str:
        return f"{self.base_url}/web/login.jsp"

    def get_captcha(self) -> Optional[str]:
        """
        Opens the login page (which sets the session cookie) and downloads the
        CAPTCHA bound to it. Returns a data URL ready for an <img> tag.
        """
        try:
            self.session.get(self.login_url, timeout=self.timeout)

            response = self.session.get(f"{self.base_url}/web/captcha.jsp", timeout=self.timeout)
            if response.status_code != 200 or not response.content:
                logger.error(f"Captcha request failed with status {response.status_code}")
                return None

            encoded = base64.b64encode(response.content).decode()
            return f"data:image/jpeg;base64,{encoded}"
        except requests.RequestException as e:
            logger.error(f"Error fetching captcha: {e}")
            return None

    def login(self, enrollment_no: str, password: str, captcha: str) -> str:
        """
        Submits the login form.
        Returns "SUCCESS", "BAD_CREDENTIALS", or "PORTAL_DOWN"
        """
        try:
            payload = {
                "enrollmentNo": enrollment_no,
                "password": password,
                "captcha": captcha,
                "submit": "Submit"
            }
            response = self.session.post(
                f"{self.base_url}/web/studentlogin.do",
                data=payload,
                headers={"Content-Type": "application/x-www-form-urlencoded"},
                timeout=self.timeout
            )

            if response.status_code >= 500:
                logger.error(f"Portal returned {response.status_code} on login for {enrollment_no}")
                return "PORTAL_DOWN"

            if "Invalid" in response.text or "incorrect" in response.text:
                logger.warning(f"Login failed for enrollment {enrollment_no}")
                return "BAD_CREDENTIALS"

            return "SUCCESS"
        except requests.RequestException as e:
            logger.error(f"Error during login for {enrollment_no}: {e}")
            return "PORTAL_DOWN"

    def get_result_html(self) -> Optional[str]:
        try:
            response = self.session.get(f"{self.base_url}/web/view-result.do", timeout=self.timeout)
            if response.status_code == 200:
                return response.text
            logger.error(f"Result page returned status {response.status_code}")
            return None
        except requests.RequestException as e:
            logger.error(f"Error fetching result page: {e}")
            return None

    def close(self):
        """Close the session to prevent resource leaks"""
        if self.session:
            self.session.close()

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()
        return False
