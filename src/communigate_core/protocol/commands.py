# src/communigate_core/protocol/commands.py
"""
CLI 命令构建器 (Command Builders)

负责把 Python 参数转换为一行可直接发送的 CLI 命令。
本模块是无状态的 (Stateless)，每个构建函数对应一种命令。
"""

from dataclasses import dataclass, replace

from .. import utils
from .constants import COMMAND_TEMPLATES, Template, Wire


@dataclass(frozen=True)
class Command:
    """一条完整替换后的命令行。

    Attributes:
        text: 命令文本 (不含行尾换行)。
        mutating: 是否修改服务器状态。成功后会话会清空缓存，且此类命令从不缓存。
        sensitive: 是否含凭据。不缓存，日志中以掩码显示。
    """

    text: str
    mutating: bool = False
    sensitive: bool = False

    def __str__(self) -> str:
        return self.text

    @property
    def display(self) -> str:
        """用于日志的文本，敏感命令只保留命令字。"""
        if not self.sensitive:
            return self.text
        verb = self.text.split(" ", 1)[0]
        if verb == self.text:
            return verb
        return f"{verb} {Wire.MASK}"


class Verbatim(str):
    """标记结构化片段 (规则列表、设置字典、关键字)，替换时不转义。"""


def _render(template: str, substitutions: dict[str, object]) -> str:
    values = {}
    for key, value in substitutions.items():
        if isinstance(value, Verbatim):
            values[key] = str(value)
        else:
            values[key] = utils.escape(str(value))

    try:
        return template.format(**values)
    except KeyError as e:
        raise ValueError(f"命令模板缺少参数: {e}") from None


def build_command(template_id: str, substitutions: dict[str, object] | None = None) -> Command:
    """按模板 ID 组装命令。

    所有普通字符串参数都会按 CLI 规则转义；`Verbatim` 参数原样插入。

    Args:
        template_id: COMMAND_TEMPLATES 中的键，如 "CreateAccount"。
        substitutions: 占位符 -> 值。

    Returns:
        Command: 不可变命令。

    Raises:
        ValueError: 未知模板 ID 或缺少占位符参数。
    """
    if template_id not in COMMAND_TEMPLATES:
        raise ValueError(f"未知的命令模板: {template_id}")

    template, mutating = COMMAND_TEMPLATES[template_id]
    return Command(_render(template, substitutions or {}), mutating=mutating)


def address(account: str, domain: str) -> str:
    """`account@domain`"""
    return f"{account}@{domain}"


# =========================================================================
# 握手 (Handshake)
# =========================================================================


def user(login: str) -> Command:
    return Command(Template.USER.format(login=login), sensitive=True)


def password(secret: str) -> Command:
    return Command(Template.PASS.format(password=secret), sensitive=True)


def inline() -> Command:
    return Command(Template.INLINE, sensitive=True)


def quit_() -> Command:
    return Command(Template.QUIT)


# =========================================================================
# 域与账户 (Domains & Accounts)
# =========================================================================


def list_domains() -> Command:
    return build_command("ListDomains")


def list_accounts(domain: str) -> Command:
    return build_command("ListAccounts", {"domain": domain})


def get_account_settings(account: str, domain: str) -> Command:
    return build_command("GetAccountSettings", {"address": address(account, domain)})


def get_account_effective_settings(account: str, domain: str) -> Command:
    return build_command(
        "GetAccountEffectiveSettings", {"address": address(account, domain)}
    )


def get_account_info(account: str, domain: str) -> Command:
    return build_command("GetAccountInfo", {"address": address(account, domain)})


def update_account_settings(account: str, domain: str, settings: str) -> Command:
    """settings 为已序列化的设置字典，如 `{MaxAccountSize=50M;}`。"""
    return build_command(
        "UpdateAccountSettings",
        {"address": address(account, domain), "settings": Verbatim(settings)},
    )


def set_account_mail_rules(account: str, domain: str, rules: str) -> Command:
    """rules 为 encode_rules 的输出。"""
    return build_command(
        "SetAccountMailRules",
        {"address": address(account, domain), "rules": Verbatim(rules)},
    )


def create_account(account: str, domain: str, secret: str) -> Command:
    command = build_command(
        "CreateAccount", {"address": address(account, domain), "password": secret}
    )
    return replace(command, sensitive=True)


def delete_account(account: str, domain: str) -> Command:
    return build_command("DeleteAccount", {"address": address(account, domain)})


def set_account_password(account: str, domain: str, secret: str) -> Command:
    command = build_command(
        "SetAccountPassword", {"address": address(account, domain), "password": secret}
    )
    return replace(command, sensitive=True)


def verify_account_password(account: str, domain: str, secret: str) -> Command:
    command = build_command(
        "VerifyAccountPassword",
        {"address": address(account, domain), "password": secret},
    )
    return replace(command, sensitive=True)


def rename_account(account: str, domain: str, new_name: str) -> Command:
    return build_command(
        "RenameAccount",
        {
            "old_address": address(account, domain),
            "new_address": address(new_name, domain),
        },
    )


# =========================================================================
# 转发器 (Forwarders)
# =========================================================================


def list_forwarders(domain: str) -> Command:
    return build_command("ListForwarders", {"domain": domain})


def get_forwarder(forwarder: str, domain: str) -> Command:
    return build_command("GetForwarder", {"address": address(forwarder, domain)})


def get_current_controller() -> Command:
    return build_command("GetCurrentController")


# =========================================================================
# 邮件列表 (Mailing Lists)
# =========================================================================


def list_lists(domain: str) -> Command:
    return build_command("ListLists", {"domain": domain})


def create_list(list_name: str, account: str) -> Command:
    return build_command("CreateList", {"list_name": list_name, "account": account})


def update_list(list_name: str, settings: dict[str, str]) -> Command:
    serialized = "{" + "".join(
        f'{key}="{utils.escape(str(value))}"; ' for key, value in settings.items()
    ) + "}"
    return build_command(
        "UpdateList", {"list_name": list_name, "settings": Verbatim(serialized)}
    )


def delete_list(list_name: str) -> Command:
    return build_command("DeleteList", {"list_name": list_name})


def get_list(list_name: str) -> Command:
    return build_command("GetList", {"list_name": list_name})


def list_subscribe(
    list_name: str,
    email: str,
    operation: str = "FEED",
    silently: bool = True,
    confirm: bool = False,
) -> Command:
    flags = ""
    if silently:
        flags += " silently"
    if confirm:
        flags += " confirm"

    return build_command(
        "List",
        {
            "list_name": list_name,
            "operation": Verbatim(operation),
            "flags": Verbatim(flags),
            "email": email,
        },
    )


def set_posting_mode(list_name: str, email: str, mode: str) -> Command:
    """mode: UNMODERATED | MODERATEALL | PROHIBITED | SPECIAL | 审核数量"""
    return build_command(
        "SetPostingMode",
        {"list_name": list_name, "email": email, "mode": Verbatim(mode)},
    )


def list_subscribers(list_name: str) -> Command:
    return build_command("ListSubscribers", {"list_name": list_name})


def get_subscriber_info(list_name: str, email: str) -> Command:
    return build_command("GetSubscriberInfo", {"list_name": list_name, "email": email})
