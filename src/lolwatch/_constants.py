"""Internal constants shared across the package."""

USER_AGENT = "lolwatch (aiohttp)"
RIOT_API_DOMAIN = "api.riotgames.com"
DISCORD_API_BASE = "https://discord.com/api/v10"

DDRAGON_BASE = "https://ddragon.leagueoflegends.com"
# Used when the versions listing cannot be fetched.
DDRAGON_FALLBACK_VERSION = "14.1.1"

# ------------------------------------------------------------------
# Queue ids  (match-v5 ``queueId`` / spectator ``gameQueueConfigId``)
# ------------------------------------------------------------------

QUEUE_NAMES: dict[int, str] = {
    400: "Draft Pick",
    420: "Ranked Solo/Duo",
    430: "Blind Pick",
    440: "Ranked Flex",
    450: "ARAM",
    490: "Quickplay",
    1700: "Arena",
}


def queue_type_name(queue_id: int | None) -> str:
    """Return a friendly name for a Riot queue id.

    Unknown ids render as ``"Queue <id>"``, a missing id as ``"Unknown"``.
    """
    if queue_id is None:
        return "Unknown"
    return QUEUE_NAMES.get(queue_id, f"Queue {queue_id}")
