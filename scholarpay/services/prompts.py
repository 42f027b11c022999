"""Natural-language commands sent to the payment provider's ask API."""

LIST_PAYEES_PROMPT = "List all payees (always in this proper manner only)"

SEND_PAYMENT_TEMPLATE = "pay {amount} tds to {recipient}"

ADD_PAYEE_TEMPLATE = 'Add payee with email {email} and name "{name}"'

WALLET_BALANCE_TEMPLATE = "Show my TDS wallet {wallet} balance"

TRANSACTION_HISTORY_PROMPT = """
Show the complete financial summary of my TDS wallet {wallet} and all of its transactions.
Answer in exactly this structure, using markdown, with no extra commentary:

## Wallet Financial Summary
- Wallet ID: <wallet id>
- Paytag: <paytag>
- Total Balance: <amount> TSD
- Spendable Balance: <amount> TSD
- Pending Balance: <amount> TSD

## Transaction Overview
- Total Transactions: <count>
- Total Debit Amount: <amount> TSD
- Currency: TSD

## Detailed Transaction Log
| Transaction ID | Date | Recipient | Amount | Type | Status | Created By |
|---|---|---|---|---|---|---|
| <id> | <YYYY-MM-DD> | <recipient> | <amount> TSD | <DEBIT or CREDIT> | <status> | <creator> |

List every transaction as one table row, newest first.
""".strip()

PAYMENT_METADATA_SOURCE = "scholarship-portal"
PAYMENT_METADATA_TYPE = "scholarship-payment"
