LANDING_PAGE_HTML = """<!DOCTYPE html>
<html lang="en">
<head>
  <meta charset="UTF-8">
  <meta name="viewport" content="width=device-width, initial-scale=1.0">
  <title>Web Proxy</title>
</head>
<body>
  <h1>Web Proxy</h1>
  <form id="proxyForm">
    <label for="url">URL to visit:</label>
    <input type="url" id="url" name="url" placeholder="https://example.com" required autocomplete="url">
    <button type="submit">Go</button>
  </form>
  <script>
    document.getElementById("proxyForm").addEventListener("submit", function (e) {
      e.preventDefault();
      var url = document.getElementById("url").value.trim();
      if (!url) {
        return;
      }
      if (!/^https?:\\/\\//.test(url)) {
        url = "https://" + url;
      }
      window.location.href = "/proxy/" + encodeURIComponent(url);
    });
  </script>
</body>
</html>
"""
