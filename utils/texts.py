# utils/texts.py
from decimal import Decimal

language_map = {
    "en": "English",
    "vi": "Tiếng Việt",
}

texts = {
    "en": {
        "welcome": "👋 Welcome to {bot_name}!\nPick an exchange, enter the amount in {fiat} and I will watch for the deposit.",
        "choose_action": "Choose an action:",
        "check_daily_balance": "Check daily balance",
        "clear_daily_balance": "Clear daily balance",
        "clear_session": "Clear session",
        "select_language": "Language",
        "select_language_prompt": "Please select your language:",
        "amount_request": "💵 {exchange}: enter the amount in {fiat}:",
        "select_exchange": "Select an exchange first: /menu",
        "invalid_amount": "❌ Invalid amount. Enter a positive number, e.g. 2570000",
        "invalid_rate": "❌ Invalid rate. Use /set vnd=25700",
        "invalid_action": "Invalid action.",
        "entered_amount": "You entered {amount} {fiat} = {converted} {asset}",
        "session_started": "⏳ Waiting for a deposit of {converted} {asset} on {exchange}. The session ends in {time} min.",
        "balance_changed": "✅ Deposit received: {difference} {asset}",
        "session_cancelled": "❌ No matching payment arrived. The session was cancelled.",
        "session_in_progress": "⏳ A payment session is in progress (up to {time} min). Use /menu to clear it.",
        "session_still_running": "⏳ The previous session is still running. Clear it first.",
        "clear_session_success": "Session cleared.",
        "clear_daily_balance_prompt": "To reset the daily balance send /clear_balances",
        "balances_cleared": "🧹 Daily balance cleared.",
        "nothing_on_balance_sheet": "Nothing on the balance sheet yet.",
        "daily_balance": "📊 Daily balance{via}: {total} {asset}\n{transactions}",
        "daily_balance_line": "{n}:   {amount} {asset}  ({fiat_amount} {fiat})  {time}",
        "price_changed": "💱 Rate changed: 1 {asset} = {price} {fiat}",
        "rate_info": "💱 Current rate: 1 {asset} = {price} {fiat}",
        "rate_reference": "📊 Binance P2P reference: 1 {asset} ≈ {reference} {fiat}",
    },
    "vi": {
        "welcome": "👋 Chào mừng đến với {bot_name}!\nChọn sàn, nhập số tiền {fiat} và bot sẽ theo dõi khoản nạp.",
        "choose_action": "Chọn thao tác:",
        "check_daily_balance": "Xem số dư trong ngày",
        "clear_daily_balance": "Xóa số dư trong ngày",
        "clear_session": "Hủy phiên",
        "select_language": "Ngôn ngữ",
        "select_language_prompt": "Vui lòng chọn ngôn ngữ:",
        "amount_request": "💵 {exchange}: nhập số tiền bằng {fiat}:",
        "select_exchange": "Hãy chọn sàn trước: /menu",
        "invalid_amount": "❌ Số tiền không hợp lệ. Nhập số dương, ví dụ 2570000",
        "invalid_rate": "❌ Tỷ giá không hợp lệ. Dùng /set vnd=25700",
        "invalid_action": "Thao tác không hợp lệ.",
        "entered_amount": "Bạn đã nhập {amount} {fiat} = {converted} {asset}",
        "session_started": "⏳ Đang chờ khoản nạp {converted} {asset} trên {exchange}. Phiên kết thúc sau {time} phút.",
        "balance_changed": "✅ Đã nhận tiền: {difference} {asset}",
        "session_cancelled": "❌ Không có thanh toán phù hợp. Phiên đã bị hủy.",
        "session_in_progress": "⏳ Phiên thanh toán đang chạy (tối đa {time} phút). Dùng /menu để hủy.",
        "session_still_running": "⏳ Phiên trước vẫn đang chạy. Hãy hủy phiên trước.",
        "clear_session_success": "Đã hủy phiên.",
        "clear_daily_balance_prompt": "Để xóa số dư trong ngày, gửi /clear_balances",
        "balances_cleared": "🧹 Đã xóa số dư trong ngày.",
        "nothing_on_balance_sheet": "Chưa có giao dịch nào.",
        "daily_balance": "📊 Số dư trong ngày{via}: {total} {asset}\n{transactions}",
        "daily_balance_line": "{n}:   {amount} {asset}  ({fiat_amount} {fiat})  {time}",
        "price_changed": "💱 Đã đổi tỷ giá: 1 {asset} = {price} {fiat}",
        "rate_info": "💱 Tỷ giá hiện tại: 1 {asset} = {price} {fiat}",
        "rate_reference": "📊 Tham khảo Binance P2P: 1 {asset} ≈ {reference} {fiat}",
    },
}


def t(lang: str, key: str, **params) -> str:
    tpl = texts.get(lang, texts["en"]).get(key) or texts["en"][key]
    return tpl.format(**params)


def fmt_fiat(value) -> str:
    # 2570000 -> 2,570,000
    if value is None:
        return "—"
    return f"{Decimal(value):,.0f}"


def fmt_asset(value) -> str:
    return f"{Decimal(value):,.2f}"


def fmt_time(dt) -> str:
    return dt.strftime("%B %d, %Y at %H:%M")


def render_balance(lang: str, summary, asset: str, fiat: str, exchange_name: str = "") -> str:
    lines = [
        t(lang, "daily_balance_line", n=i, amount=fmt_asset(tx["amount"]), asset=asset,
          fiat_amount=fmt_fiat(tx.get("fiat_amount")), fiat=fiat, time=fmt_time(tx["timestamp"]))
        for i, tx in enumerate(summary.transactions, start=1)
    ]
    via = f" via {exchange_name}" if exchange_name else ""
    return t(lang, "daily_balance", via=via, total=fmt_asset(summary.total), asset=asset,
             transactions="\n".join(lines))
