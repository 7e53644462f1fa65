"""Identity provider implementations.

``PROVIDERS`` maps each provider's default name to its class; the config layer
uses it to build providers from ``type:`` entries.
"""

from .amazon import AmazonProvider
from .apple import AppleProvider
from .atlassian import AtlassianProvider
from .auth0 import Auth0Provider
from .battlenet import BattlenetProvider
from .bitbucket import BitbucketProvider
from .box import BoxProvider
from .cognito import CognitoProvider
from .dailymotion import DailymotionProvider
from .digitalocean import DigitalOceanProvider
from .discord import DiscordProvider
from .dropbox import DropboxProvider
from .eveonline import EveOnlineProvider
from .facebook import FacebookProvider
from .faux import FauxProvider
from .fitbit import FitbitProvider
from .gitee import GiteeProvider
from .github import GitHubProvider
from .gitlab import GitLabProvider
from .google import GoogleProvider
from .instagram import InstagramProvider
from .lastfm import LastFMProvider
from .linkedin import LinkedInProvider
from .microsoftonline import MicrosoftOnlineProvider
from .nextcloud import NextcloudProvider
from .okta import OktaProvider
from .openidconnect import OpenIDConnectProvider
from .patreon import PatreonProvider
from .paypal import PayPalProvider
from .reddit import RedditProvider
from .salesforce import SalesforceProvider
from .shopify import ShopifyProvider
from .slack import SlackProvider
from .spotify import SpotifyProvider
from .strava import StravaProvider
from .tumblr import TumblrProvider
from .twitch import TwitchProvider
from .twitter import TwitterProvider
from .uber import UberProvider
from .vk import VKProvider
from .xero import XeroProvider
from .yandex import YandexProvider
from .zoom import ZoomProvider

PROVIDERS: dict[str, type] = {
    cls.provider_name: cls
    for cls in (
        AmazonProvider,
        AppleProvider,
        AtlassianProvider,
        Auth0Provider,
        BattlenetProvider,
        BitbucketProvider,
        BoxProvider,
        CognitoProvider,
        DailymotionProvider,
        DigitalOceanProvider,
        DiscordProvider,
        DropboxProvider,
        EveOnlineProvider,
        FacebookProvider,
        FauxProvider,
        FitbitProvider,
        GiteeProvider,
        GitHubProvider,
        GitLabProvider,
        GoogleProvider,
        InstagramProvider,
        LastFMProvider,
        LinkedInProvider,
        MicrosoftOnlineProvider,
        NextcloudProvider,
        OktaProvider,
        OpenIDConnectProvider,
        PatreonProvider,
        PayPalProvider,
        RedditProvider,
        SalesforceProvider,
        ShopifyProvider,
        SlackProvider,
        SpotifyProvider,
        StravaProvider,
        TumblrProvider,
        TwitchProvider,
        TwitterProvider,
        UberProvider,
        VKProvider,
        XeroProvider,
        YandexProvider,
        ZoomProvider,
    )
}

__all__ = [
    "PROVIDERS",
    "AmazonProvider",
    "AppleProvider",
    "AtlassianProvider",
    "Auth0Provider",
    "BattlenetProvider",
    "BitbucketProvider",
    "BoxProvider",
    "CognitoProvider",
    "DailymotionProvider",
    "DigitalOceanProvider",
    "DiscordProvider",
    "DropboxProvider",
    "EveOnlineProvider",
    "FacebookProvider",
    "FauxProvider",
    "FitbitProvider",
    "GiteeProvider",
    "GitHubProvider",
    "GitLabProvider",
    "GoogleProvider",
    "InstagramProvider",
    "LastFMProvider",
    "LinkedInProvider",
    "MicrosoftOnlineProvider",
    "NextcloudProvider",
    "OktaProvider",
    "OpenIDConnectProvider",
    "PatreonProvider",
    "PayPalProvider",
    "RedditProvider",
    "SalesforceProvider",
    "ShopifyProvider",
    "SlackProvider",
    "SpotifyProvider",
    "StravaProvider",
    "TumblrProvider",
    "TwitchProvider",
    "TwitterProvider",
    "UberProvider",
    "VKProvider",
    "XeroProvider",
    "YandexProvider",
    "ZoomProvider",
]
