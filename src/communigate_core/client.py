# File: src/communigate_core/client.py
"""
CommuniGate CLI 高层客户端

在 CliSession 之上提供域、账户、规则、转发器与邮件列表的常用操作。
每个方法只负责构建命令、调用会话并整理结果，不持有额外状态。
"""

import logging
import re

from . import utils
from .exceptions import ServerError, ServerErrorCode, ValidationError
from .protocol import commands
from .protocol.constants import AccountConst, RuleConst, Wire
from .protocol.decoder import Scalar
from .protocol.rules import decode_rules, encode_rules, extract_rule_value, find_rule
from .session import CliSession

logger = logging.getLogger(__name__)

# UpdateList 未指定设置时使用的默认值
DEFAULT_LIST_SETTINGS: dict[str, str] = {
    "ArchiveMessageLimit": "0",
    "ArchiveSizeLimit": "50M",
    "ArchiveSwapPeriod": "-1",
    "Browse": "nobody",
    "ByeSubject": "",
    "ByeText": "",
    "Charset": "utf-8",
    "CheckCharset": "NO",
    "CheckDigestSubject": "YES",
    "CleanupPeriod": "1h",
    "Confirmation": "NO",
    "ConfirmationSubject": "",
    "ConfirmationText": "",
    "CoolOffPeriod": "1h",
    "DigestFormat": "plain text",
    "DigestHeader": "",
    "DigestMessageLimit": "100000",
    "DigestPeriod": "100d",
    "DigestSizeLimit": "unlimited",
    "DigestSubject": "",
    "DigestTimeOfDay": "5h",
    "DigestTrailer": "",
    "Distribution": "feed",
    "FailureNotification": "NO",
    "FatalWeight": "10000",
    "FeedHeader": "",
    "FeedPrefixMode": "NO",
    "FeedSubject": "",
    "FeedTrailer": "",
    "FirstModerated": "10001",
    "Format": "anything",
    "HideFromAddress": "NO",
    "KeepToAndCc": "remove",
    "ListFields": "",
    "LogLevel": "0",
    "MaxBounces": "200",
    "OwnerCheck": "IP Addresses",
    "PolicySubject": "",
    "PolicyText": "",
    "Postings": "from anybody",
    "Reply": "to Sender",
    "SaveReports": "no",
    "SaveRequests": "no",
    "SizeLimit": "unlimited",
    "Store": "NO",
    "Subscribe": "nobody",
    "SupplFields": "()",
    "TillConfirmed": "NO",
    "TOCLine": "",
    "TOCTrailer": "",
    "UnsubBouncedPeriod": "7d",
    "WarningSubject": "",
    "WarningText": "",
}


def _field_key(field: str) -> str:
    return field.split("=", 1)[0].strip()


def _field_value(field: str) -> str:
    return field.split("=", 1)[1].strip() if "=" in field else ""


class CommunigateClient:
    """CommuniGate 管理操作的便捷封装。

    Example:
        >>> with CliSession(config) as session:
        ...     client = CommunigateClient(session)
        ...     client.set_account_vacation_message("example.com", "bob", "外出中")
    """

    def __init__(self, session: CliSession) -> None:
        self.session = session

    # ------------------------------------------------------------------
    # 域与账户
    # ------------------------------------------------------------------

    def get_domains(self) -> list[str]:
        return self.session.execute(commands.list_domains()).as_list()

    def get_accounts(self, domain: str) -> list[str]:
        """返回域下的账户名 (去掉 `=账户类型` 部分)。"""
        fields = self.session.execute(commands.list_accounts(domain)).as_list()
        return [_field_key(field) for field in fields]

    def get_account_details(self, domain: str, account: str) -> list[str]:
        """返回账户的生效设置，元素形如 `Key=Value`。"""
        return self.session.execute(
            commands.get_account_effective_settings(account, domain)
        ).as_list()

    def get_account_password(self, domain: str, account: str) -> str | None:
        password = None
        for field in self.get_account_details(domain, account):
            match = re.match(r'^Password="?([^"]*)"?', field)
            if match:
                password = match.group(1)
        return password

    def get_account_storage(self, domain: str, account: str) -> dict[str, int]:
        """返回账户的存储配额与已用量 (MB)。

        Returns:
            dict: {"max": 配额, "used": 已用量}
        """
        fields = self.session.execute(commands.get_account_info(account, domain)).as_list()
        fields += self.get_account_details(domain, account)

        used: str | None = None
        max_size: str | None = None
        for field in fields:
            key = _field_key(field).lower()
            if key.startswith(AccountConst.STORAGE_USED_FIELD):
                used = _field_value(field)
            if key.startswith(AccountConst.MAX_SIZE_FIELD):
                max_size = _field_value(field)

        return {"max": utils.to_megabytes(max_size), "used": utils.to_megabytes(used)}

    def set_account_storage(
        self, domain: str, account: str, max_size: int | str = AccountConst.DEFAULT_MAX_SIZE
    ) -> bool:
        size = str(max_size)
        if not re.search("m", size, re.IGNORECASE):
            size = f"{size}M"

        self.session.execute(
            commands.update_account_settings(account, domain, f"{{MaxAccountSize={size};}}")
        )
        return True

    def create_account(self, domain: str, account: str, password: str) -> bool:
        """创建账户。

        Raises:
            ValidationError: 账户名包含不允许的字符 (命令不会发送)。
        """
        if not re.match(AccountConst.NAME_PATTERN, account):
            raise ValidationError(f"账户名格式无效: {account!r}")

        self.session.execute(commands.create_account(account, domain, password))
        return True

    def delete_account(self, domain: str, account: str) -> bool:
        self.session.execute(commands.delete_account(account, domain))
        return True

    def rename_account(self, domain: str, account: str, new_name: str) -> bool:
        self.session.execute(commands.rename_account(account, domain, new_name))
        return True

    def reset_password(self, domain: str, account: str, password: str) -> bool:
        self.session.execute(commands.set_account_password(account, domain, password))
        return True

    def verify_password(self, domain: str, account: str, password: str) -> bool:
        """校验账户密码。密码错误 (515) 返回 False，其它错误照常抛出。"""
        try:
            self.session.execute(commands.verify_account_password(account, domain, password))
        except ServerError as e:
            if e.code == ServerErrorCode.BAD_PASSWORD:
                return False
            raise
        return True

    # ------------------------------------------------------------------
    # 邮件规则
    # ------------------------------------------------------------------

    def _get_account_rule(self, domain: str, account: str, name: str) -> str | None:
        rules = decode_rules(self.get_account_details(domain, account))
        return find_rule(rules, name)

    def _set_account_rule(
        self, domain: str, account: str, value: str, marker: str, template: str
    ) -> bool:
        """读取当前规则，替换/追加/删除目标规则后整体写回。"""
        rules = decode_rules(self.get_account_details(domain, account))
        encoded = encode_rules(rules, marker, template, value)
        logger.debug(f"{account}@{domain} 新规则列表: {encoded}")

        self.session.execute(commands.set_account_mail_rules(account, domain, encoded))
        return True

    def get_account_email_redirect(self, domain: str, account: str) -> str | None:
        """返回转发地址，多个地址以 `;` 分隔。"""
        rule = self._get_account_rule(domain, account, RuleConst.REDIRECT_NAME)
        if rule is None:
            return None

        value = extract_rule_value(rule, "Mirror to")
        if value is None:
            return None
        return utils.unescape(value, continuation=";")

    def set_account_email_redirect(self, domain: str, account: str, email: str) -> bool:
        """设置转发地址。email 可用 `,` 或 `;` 分隔多个地址；传空串即删除。"""
        value = re.sub(r"[,;]", lambda _: Wire.CONTINUATION_MARKER, utils.escape(email))
        return self._set_account_rule(
            domain, account, value, RuleConst.REDIRECT_MARKER, RuleConst.REDIRECT_STRUCT
        )

    def clear_account_email_redirect(self, domain: str, account: str) -> bool:
        return self.set_account_email_redirect(domain, account, "")

    def get_account_vacation_message(self, domain: str, account: str) -> str | None:
        rule = self._get_account_rule(domain, account, RuleConst.VACATION_NAME)
        if rule is None:
            return None

        value = extract_rule_value(rule, "Reply with")
        if value is None:
            return None
        return utils.unescape(value, continuation="\n")

    def set_account_vacation_message(self, domain: str, account: str, message: str) -> bool:
        """设置自动回复内容；传空串即删除。"""
        value = utils.escape(message).replace("\r", "").replace("\n", Wire.CONTINUATION_MARKER)
        return self._set_account_rule(
            domain, account, value, RuleConst.VACATION_MARKER, RuleConst.VACATION_STRUCT
        )

    def clear_account_vacation_message(self, domain: str, account: str) -> bool:
        return self.set_account_vacation_message(domain, account, "")

    # ------------------------------------------------------------------
    # 转发器
    # ------------------------------------------------------------------

    def get_forwarders(self, domain: str) -> dict[str, str]:
        """返回 {转发器名: 目标地址}。"""
        forwarders = {}
        for name in self.session.execute(commands.list_forwarders(domain)).as_list():
            target = self.session.execute(commands.get_forwarder(name, domain)).as_list()
            forwarders[name] = target[0].strip('"') if target else ""
        return forwarders

    def get_current_controller(self) -> str:
        body = self.session.execute(commands.get_current_controller())
        if isinstance(body, Scalar):
            return body.value
        return " ".join(body.as_list())

    # ------------------------------------------------------------------
    # 邮件列表
    # ------------------------------------------------------------------

    def list_lists(self, domain: str) -> list[str]:
        return self.session.execute(commands.list_lists(domain)).as_list()

    def create_list(self, list_name: str, account: str) -> bool:
        self.session.execute(commands.create_list(list_name, account))
        return True

    def get_list(self, list_name: str) -> list[str]:
        return self.session.execute(commands.get_list(list_name)).as_list()

    def update_list(self, list_name: str, settings: dict[str, str] | None = None) -> bool:
        self.session.execute(commands.update_list(list_name, settings or DEFAULT_LIST_SETTINGS))
        return True

    def delete_list(self, list_name: str) -> bool:
        self.session.execute(commands.delete_list(list_name))
        return True

    def add_list_subscriber(
        self,
        list_name: str,
        email: str,
        operation: str = "FEED",
        silently: bool = True,
        confirm: bool = False,
    ) -> bool:
        self.session.execute(
            commands.list_subscribe(list_name, email, operation, silently, confirm)
        )
        return True

    def set_posting_mode(self, list_name: str, email: str, mode: str) -> bool:
        self.session.execute(commands.set_posting_mode(list_name, email, mode))
        return True

    def list_subscribers(self, list_name: str) -> list[str]:
        return self.session.execute(commands.list_subscribers(list_name)).as_list()

    def get_subscriber_info(self, list_name: str, email: str) -> list[str]:
        return self.session.execute(commands.get_subscriber_info(list_name, email)).as_list()
