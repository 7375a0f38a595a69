"""
CommuniGate CLI 协议层 - 常量定义

本模块定义了所有协议相关的状态码、命令模板和规则结构。
采用命名空间 (Class Namespace) 组织，不使用扁平全局变量。
"""

# =========================================================================
# 1. 状态码 (Status Codes)
# =========================================================================


class ResponseCode:
    """被视为成功的应答状态码"""

    OK = 200
    OK_INLINE = 201
    EXPECTING_MORE = 300


# 成功白名单：状态码 -> 描述
SUCCESS_CODES: dict[int, str] = {
    ResponseCode.OK: "OK",
    ResponseCode.OK_INLINE: "OK (inline)",
    ResponseCode.EXPECTING_MORE: "Expecting more input",
}


# =========================================================================
# 2. 线路格式 (Wire Format)
# =========================================================================


class Wire:
    LINE_TERMINATOR = "\n"
    ENCODING = "utf-8"

    # 服务器字符串中的换行转义
    CONTINUATION_MARKER = "\\e"

    # 日志中替代敏感参数的占位符
    MASK = "******"


# =========================================================================
# 3. 命令模板 (Command Templates)
# =========================================================================
# 占位符使用 str.format 语法；字面量花括号写作 {{ }}。


class Template:
    USER = "USER {login}"
    PASS = "PASS {password}"
    INLINE = "INLINE"
    QUIT = "QUIT"

    LIST_DOMAINS = "ListDomains"
    LIST_ACCOUNTS = 'ListAccounts "{domain}"'
    GET_ACCOUNT_SETTINGS = 'GetAccountSettings "{address}"'
    GET_ACCOUNT_EFFECTIVE_SETTINGS = 'GetAccountEffectiveSettings "{address}"'
    GET_ACCOUNT_INFO = 'GetAccountInfo "{address}"'
    UPDATE_ACCOUNT_SETTINGS = 'UpdateAccountSettings "{address}" {settings}'
    SET_ACCOUNT_MAIL_RULES = 'SetAccountMailRules "{address}" {rules}'
    CREATE_ACCOUNT = 'CreateAccount "{address}" {{Password = "{password}";}}'
    DELETE_ACCOUNT = 'DeleteAccount "{address}"'
    SET_ACCOUNT_PASSWORD = 'SetAccountPassword "{address}" PASSWORD "{password}"'
    VERIFY_ACCOUNT_PASSWORD = 'VerifyAccountPassword "{address}" PASSWORD "{password}"'
    RENAME_ACCOUNT = 'RenameAccount "{old_address}" into "{new_address}"'

    LIST_FORWARDERS = 'ListForwarders "{domain}"'
    GET_FORWARDER = 'GetForwarder "{address}"'
    GET_CURRENT_CONTROLLER = "GetCurrentController"

    LIST_LISTS = 'ListLists "{domain}"'
    CREATE_LIST = 'CreateList "{list_name}" for "{account}"'
    UPDATE_LIST = 'UpdateList "{list_name}" {settings}'
    DELETE_LIST = 'DeleteList "{list_name}"'
    GET_LIST = 'GetList "{list_name}"'
    LIST_SUBSCRIBE = 'List "{list_name}" {operation}{flags} "{email}"'
    SET_POSTING_MODE = 'SetPostingMode "{list_name}" FOR "{email}" {mode}'
    LIST_SUBSCRIBERS = 'ListSubscribers "{list_name}"'
    GET_SUBSCRIBER_INFO = 'GetSubscriberInfo "{list_name}" NAME "{email}"'


# 模板 ID -> (模板, 是否修改服务器状态)
COMMAND_TEMPLATES: dict[str, tuple[str, bool]] = {
    "ListDomains": (Template.LIST_DOMAINS, False),
    "ListAccounts": (Template.LIST_ACCOUNTS, False),
    "GetAccountSettings": (Template.GET_ACCOUNT_SETTINGS, False),
    "GetAccountEffectiveSettings": (Template.GET_ACCOUNT_EFFECTIVE_SETTINGS, False),
    "GetAccountInfo": (Template.GET_ACCOUNT_INFO, False),
    "UpdateAccountSettings": (Template.UPDATE_ACCOUNT_SETTINGS, True),
    "SetAccountMailRules": (Template.SET_ACCOUNT_MAIL_RULES, True),
    "CreateAccount": (Template.CREATE_ACCOUNT, True),
    "DeleteAccount": (Template.DELETE_ACCOUNT, True),
    "SetAccountPassword": (Template.SET_ACCOUNT_PASSWORD, True),
    "VerifyAccountPassword": (Template.VERIFY_ACCOUNT_PASSWORD, False),
    "RenameAccount": (Template.RENAME_ACCOUNT, True),
    "ListForwarders": (Template.LIST_FORWARDERS, False),
    "GetForwarder": (Template.GET_FORWARDER, False),
    "GetCurrentController": (Template.GET_CURRENT_CONTROLLER, False),
    "ListLists": (Template.LIST_LISTS, False),
    "CreateList": (Template.CREATE_LIST, True),
    "UpdateList": (Template.UPDATE_LIST, True),
    "DeleteList": (Template.DELETE_LIST, True),
    "GetList": (Template.GET_LIST, False),
    "List": (Template.LIST_SUBSCRIBE, True),
    "SetPostingMode": (Template.SET_POSTING_MODE, True),
    "ListSubscribers": (Template.LIST_SUBSCRIBERS, False),
    "GetSubscriberInfo": (Template.GET_SUBSCRIBER_INFO, False),
}


# =========================================================================
# 4. 邮件规则 (Mail Rules)
# =========================================================================


class RuleConst:
    # 设置字典中保存规则列表的字段前缀
    RULES_FIELD = "Rules="

    # 替换模板中的值占位符
    PLACEHOLDER = "$$"

    # 规则记录的最小形状: 优先级数字, 逗号, 引号, #
    RECORD_SHAPE = r'^\d+,\s*"#'

    # 空规则列表的序列化结果 (恢复服务器默认)
    DEFAULT = "Default"

    # 转发规则
    REDIRECT_NAME = "#Redirect"
    REDIRECT_MARKER = '"Mirror to",'
    REDIRECT_STRUCT = '(1,"#Redirect",(),(("Mirror to","$$"),(Discard,"---")))'

    # 自动回复规则
    VACATION_NAME = "#Vacation"
    VACATION_MARKER = '"Reply with",'
    VACATION_STRUCT = (
        '(2,"#Vacation",(("Human Generated","---"),(From,"not in","#RepliedAddresses")),'
        '(("Reply with","$$"),("Remember \'From\' in",RepliedAddresses)))'
    )


# =========================================================================
# 5. 账户校验 (Account Validation)
# =========================================================================


class AccountConst:
    NAME_PATTERN = r"^[a-zA-Z0-9,._%+-]+$"

    # 存储配额字段 (大小写不敏感)
    STORAGE_USED_FIELD = "storageused"
    MAX_SIZE_FIELD = "maxaccountsize"
    DEFAULT_MAX_SIZE = 50
