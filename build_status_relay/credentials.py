import json

from google.cloud import exceptions, kms_v1, storage

TOKEN_OBJECT = 'github'


class MissingCredentials(Exception):
    pass


def get_ciphertext(bucket_name, obj):
    client = storage.Client()

    try:
        bucket = client.get_bucket(bucket_name)
    except exceptions.NotFound:
        raise MissingCredentials(f"Could not find bucket {bucket_name}")

    blob = bucket.get_blob(obj)
    if blob is None:
        raise MissingCredentials(f"Could not find object {obj} in bucket {bucket_name}")

    return blob.download_as_bytes()


def decrypt(crypto_key_id, ciphertext):
    return kms_v1 \
        .KeyManagementServiceClient() \
        .decrypt(name=crypto_key_id, ciphertext=ciphertext) \
        .plaintext \
        .decode('utf-8') \
        .strip()


def github_token(config):
    """
    The GitHub access token, read once at startup.

    A token given directly wins; otherwise it is decrypted from the
    ``github`` object in the credentials bucket, a JSON document with a
    ``token`` key.
    """

    if config.github_access_token:
        return config.github_access_token

    if not (config.credentials_bucket and config.kms_crypto_key_id):
        raise MissingCredentials(
                "a mandatory field (GITHUB_ACCESS_TOKEN, or CREDENTIALS_BUCKET "
                "with KMS_CRYPTO_KEY_ID) is unspecified or empty.")

    ciphertext = get_ciphertext(config.credentials_bucket, TOKEN_OBJECT)
    plaintext = decrypt(config.kms_crypto_key_id, ciphertext)

    try:
        token = json.loads(plaintext)['token']
    except (ValueError, KeyError, TypeError):
        raise MissingCredentials(
                f"Object {TOKEN_OBJECT} in bucket {config.credentials_bucket} has no token")

    if not token:
        raise MissingCredentials(f"Empty token in bucket {config.credentials_bucket}")

    return token
