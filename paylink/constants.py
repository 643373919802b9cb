# paylink/constants.py
# proof upload conversation states
WAITING_BUYER_NAME, WAITING_BUYER_EMAIL, WAITING_PROOF_URL = range(3)

CONFIRM_CALLBACK_PREFIX = "confirm_payment_"
CANCEL_PROOF_CALLBACK = "cancel_proof"
