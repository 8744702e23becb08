"""Droplet-side Shadowbox installer appended to every generated script.

Defines the ``cloud::public_ip`` and ``cloud::add_tag`` functions the
installer relies on, then runs the install. Reads ``DO_ACCESS_TOKEN``,
``SB_DEFAULT_SERVER_NAME`` and the optional ``SB_*`` settings from the
environment set up by the script header.
"""

SCRIPT = r"""
readonly DO_METADATA_URL="http://169.254.169.254/metadata/v1"

function cloud::public_ip() {
  curl -s "${DO_METADATA_URL}/interfaces/public/0/ipv4/address"
}

# Adds a key-value tag to the droplet through the DigitalOcean API.
function cloud::add_tag() {
  local -r tag="$1"
  local -r droplet_id="$(curl -s "${DO_METADATA_URL}/id")"
  curl -s --fail -X POST \
    -H "Content-Type: application/json" \
    -H "Authorization: Bearer ${DO_ACCESS_TOKEN}" \
    -d "{\"name\":\"${tag}\"}" \
    "https://api.digitalocean.com/v2/tags" > /dev/null || true
  curl -s --fail -X POST \
    -H "Content-Type: application/json" \
    -H "Authorization: Bearer ${DO_ACCESS_TOKEN}" \
    -d "{\"resources\":[{\"resource_id\":\"${droplet_id}\",\"resource_type\":\"droplet\"}]}" \
    "https://api.digitalocean.com/v2/tags/${tag}/resources" > /dev/null
}

# Hex-encodes a value so it survives as a tag name.
function cloud::hex_tag() {
  local -r key="$1"
  local -r value="$2"
  cloud::add_tag "kv:${key}:$(printf '%s' "${value}" | xxd -p -c 255)"
}

readonly SHADOWBOX_DIR="${SHADOWBOX_DIR:-/opt/outline}"
mkdir -p "${SHADOWBOX_DIR}"

cloud::hex_tag "install-started" "true"

export SB_PUBLIC_IP="$(cloud::public_ip)"
readonly INSTALL_LOG="${SHADOWBOX_DIR}/install.log"

curl -sSL https://raw.githubusercontent.com/Jigsaw-Code/outline-server/master/src/server_manager/install_scripts/install_server.sh \
  | bash -s -- --hostname "${SB_PUBLIC_IP}" > "${INSTALL_LOG}" 2>&1 || {
    cloud::hex_tag "install-error" "$(tail -n 1 "${INSTALL_LOG}")"
    exit 1
  }

readonly ACCESS_CONFIG="${SHADOWBOX_DIR}/access.txt"
while IFS=: read -r key value; do
  cloud::hex_tag "${key}" "${value}"
done < "${ACCESS_CONFIG}"

cloud::hex_tag "install-completed" "true"
"""
