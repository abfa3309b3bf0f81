from cms_backend.post_views import (
    BaseView,
    EngagementDecorator,
    SeoDecorator,
    enrich_post,
)


def test_base_view_copies_title_content_author():
    post = {'title': 'T', 'content': 'C', 'author': {'username': 'ann'}, 'views': 4}
    assert BaseView(post).details() == {'title': 'T', 'content': 'C', 'author': {'username': 'ann'}}


def test_engagement_popularity_weights_likes_twice():
    details = EngagementDecorator(BaseView({'title': 't', 'views': 0, 'likes': 5})).details()
    assert details['views'] == 0
    assert details['popularity'] == 10


def test_engagement_missing_counters_default_to_zero():
    details = EngagementDecorator(BaseView({'title': 't'})).details()
    assert details['views'] == 0
    assert details['popularity'] == 0


def test_slug_strips_punctuation():
    seo = SeoDecorator(BaseView({'title': 'Hello World!', 'content': 'x'})).details()['seo']
    assert seo['slug'] == 'hello-world'


def test_slug_fallback_when_title_missing():
    seo = SeoDecorator(BaseView({'content': 'x'})).details()['seo']
    assert seo['slug'] == 'untitled-post'


def test_meta_description_boundary():
    exact = SeoDecorator(BaseView({'title': 't', 'content': 'a' * 160})).details()['seo']
    assert exact['metaDescription'] == 'a' * 160

    longer = SeoDecorator(BaseView({'title': 't', 'content': 'b' * 161})).details()['seo']
    assert longer['metaDescription'] == 'b' * 160 + '...'


def test_meta_description_fallback_for_non_text():
    seo = SeoDecorator(BaseView({'title': 't', 'content': None})).details()['seo']
    assert seo['metaDescription'] == 'No description available'


def test_keywords_unique_long_words_in_order_capped():
    post = {
        'title': 'Python Decorators Explained',
        'content': 'python decorators wrap functions; decorators compose nicely and cleanly',
    }
    seo = SeoDecorator(BaseView(post)).details()['seo']
    assert seo['keywords'] == ['python', 'decorators', 'explained', 'functions;', 'compose']


def test_decorator_order_does_not_change_values():
    post = {'title': 'Order Test', 'content': 'Some content for ordering checks', 'views': 3, 'likes': 2}
    a = SeoDecorator(EngagementDecorator(BaseView(post))).details()
    b = EngagementDecorator(SeoDecorator(BaseView(post))).details()
    assert a == b
    assert a['popularity'] == 7
    assert a['seo']['slug'] == 'order-test'


def test_enrich_post_contains_every_facet():
    details = enrich_post({'title': 'Chain Test', 'content': 'Content for testing', 'views': 0, 'likes': 10})
    assert set(details) == {'title', 'content', 'author', 'views', 'popularity', 'seo'}
    assert details['popularity'] == 20
